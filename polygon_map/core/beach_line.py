"""
Beach line of the Fortune sweep.

The beach line is a binary tree stored in an arena: nodes live in a list and
refer to each other by index, with NIL standing for "no node". Leaves are
arcs (a parabola fragment owned by one cell), internal nodes are breakpoints
(the moving intersection of two adjacent arcs, tracing their bisector as a
half-edge). Leaves read left to right give the arcs in x order.

The tree is never rebalanced, so an arc lookup is O(depth), which is O(n)
in the worst case (for instance many sites sharing the same y).
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple

import structlog

from .cell import VoronoiCell
from .events import CircleEvent
from .geometry import EPSILON, Edge, HalfEdge, Rectangle, Vector
from .intersection import clip_ray

logger = structlog.get_logger()

NIL = -1

# Start of vertical bisectors between sites inserted on the same sweep line,
# in box sizes above the box top.
FAR_FACTOR = 1e6


class TracedEdge(NamedTuple):
    """A bounded edge together with the half-edge that traced it and the cells it separates."""
    edge: Edge
    half_edge: HalfEdge
    left_cell: VoronoiCell
    right_cell: VoronoiCell


class BeachLineError(RuntimeError):
    """The beach line tree violates one of its structural invariants."""


class NodeKind(Enum):
    ARC = "arc"
    BREAKPOINT = "breakpoint"


@dataclass
class BeachNode:
    """
    Arena record for both node kinds.

    Arcs use `cell` and `event`; breakpoints use `half_edge`, `left_cell`,
    `right_cell` and always have two children.
    """
    kind: NodeKind
    parent: int = NIL
    left: int = NIL
    right: int = NIL
    cell: Optional[VoronoiCell] = None
    event: Optional[CircleEvent] = None
    half_edge: Optional[HalfEdge] = None
    left_cell: Optional[VoronoiCell] = None
    right_cell: Optional[VoronoiCell] = None

    @property
    def is_arc(self) -> bool:
        return self.kind is NodeKind.ARC


def parabola_y(focus: Vector, x: float, sweep_y: float) -> float:
    """y of the parabola with the given focus and the sweep line as directrix."""
    dp = 2 * (focus.y - sweep_y)
    return ((x - focus.x) ** 2 + focus.y ** 2 - sweep_y ** 2) / dp


def breakpoint_x(left: Vector, right: Vector, sweep_y: float) -> float:
    """
    x of the breakpoint between the arc of `left` and the arc of `right`.

    Solves the two confocal parabola equations and keeps the root consistent
    with which site is lower. Sites lying on the sweep line have degenerate
    parabolas (vertical rays) and are handled directly.
    """
    left_on_sweep = abs(left.y - sweep_y) < EPSILON
    right_on_sweep = abs(right.y - sweep_y) < EPSILON
    if left_on_sweep and right_on_sweep:
        return (left.x + right.x) / 2
    if left_on_sweep:
        return left.x
    if right_on_sweep:
        return right.x
    if abs(left.y - right.y) < EPSILON:
        return (left.x + right.x) / 2

    dl = 2 * (left.y - sweep_y)
    dr = 2 * (right.y - sweep_y)

    a = 1 / dr - 1 / dl
    b = -2 * right.x / dr + 2 * left.x / dl
    c = (right.x ** 2 + right.y ** 2 - sweep_y ** 2) / dr - (left.x ** 2 + left.y ** 2 - sweep_y ** 2) / dl

    root = math.sqrt(max(b * b - 4 * a * c, 0.0))
    x1 = (-b + root) / (2 * a)
    x2 = (-b - root) / (2 * a)
    return min(x1, x2) if left.y > right.y else max(x1, x2)


class BeachLine:
    """Arena-backed binary tree of arcs and breakpoints."""

    def __init__(self, box: Rectangle, root_cell: VoronoiCell):
        self.box = box
        self._nodes: List[BeachNode] = []
        # Half-edges created together by a split trace the same bisector
        self.twins: Dict[HalfEdge, HalfEdge] = {}
        self.root = self._new_arc(root_cell)

    # Arena plumbing

    def _new_arc(self, cell: VoronoiCell) -> int:
        self._nodes.append(BeachNode(NodeKind.ARC, cell=cell))
        return len(self._nodes) - 1

    def _new_breakpoint(self, half_edge: HalfEdge, left_cell: VoronoiCell,
                        right_cell: VoronoiCell) -> int:
        self._nodes.append(BeachNode(
            NodeKind.BREAKPOINT,
            half_edge=half_edge,
            left_cell=left_cell,
            right_cell=right_cell,
        ))
        return len(self._nodes) - 1

    def _set_left(self, parent: int, child: int) -> None:
        self._nodes[parent].left = child
        self._nodes[child].parent = parent

    def _set_right(self, parent: int, child: int) -> None:
        self._nodes[parent].right = child
        self._nodes[child].parent = parent

    def _replace(self, old: int, new: int) -> None:
        """Put `new` where `old` hangs in the tree."""
        parent = self._nodes[old].parent
        if parent == NIL:
            self.root = new
            self._nodes[new].parent = NIL
        elif self._nodes[parent].left == old:
            self._set_left(parent, new)
        else:
            self._set_right(parent, new)
        self._nodes[old].parent = NIL

    def node(self, index: int) -> BeachNode:
        return self._nodes[index]

    def is_arc(self, index: int) -> bool:
        return self._nodes[index].kind is NodeKind.ARC

    # Traversal

    def arcs(self) -> List[int]:
        """Arc indices in left-to-right order."""
        result = []
        stack = []
        current = self.root
        while stack or current != NIL:
            while current != NIL:
                stack.append(current)
                current = self._nodes[current].left
            current = stack.pop()
            if self._nodes[current].is_arc:
                result.append(current)
            current = self._nodes[current].right
        return result

    def breakpoints(self) -> Iterator[int]:
        """Breakpoint indices, pre-order."""
        stack = [self.root]
        while stack:
            index = stack.pop()
            node = self._nodes[index]
            if node.is_arc:
                continue
            yield index
            stack.append(node.right)
            stack.append(node.left)

    def left_arc_of(self, breakpoint: int) -> int:
        index = self._nodes[breakpoint].left
        while not self._nodes[index].is_arc:
            index = self._nodes[index].right
        return index

    def right_arc_of(self, breakpoint: int) -> int:
        index = self._nodes[breakpoint].right
        while not self._nodes[index].is_arc:
            index = self._nodes[index].left
        return index

    def left_breakpoint_of(self, arc: int) -> int:
        """Closest breakpoint on the left of an arc, NIL for the leftmost arc."""
        child = arc
        parent = self._nodes[arc].parent
        while parent != NIL and self._nodes[parent].left == child:
            child = parent
            parent = self._nodes[parent].parent
        return parent

    def right_breakpoint_of(self, arc: int) -> int:
        """Closest breakpoint on the right of an arc, NIL for the rightmost arc."""
        child = arc
        parent = self._nodes[arc].parent
        while parent != NIL and self._nodes[parent].right == child:
            child = parent
            parent = self._nodes[parent].parent
        return parent

    # Sweep operations

    def breakpoint_position(self, breakpoint: int, sweep_y: float) -> float:
        """Current x of a breakpoint for the sweep line at sweep_y."""
        left = self._nodes[self.left_arc_of(breakpoint)].cell.site
        right = self._nodes[self.right_arc_of(breakpoint)].cell.site
        return breakpoint_x(left, right, sweep_y)

    def arc_above(self, site: Vector) -> int:
        """Arc lying vertically above a new site (the arc the site splits)."""
        index = self.root
        while not self._nodes[index].is_arc:
            x = self.breakpoint_position(index, site.y)
            node = self._nodes[index]
            index = node.left if x > site.x else node.right
        return index

    def split(self, arc: int, cell: VoronoiCell) -> Tuple[int, int]:
        """
        Replace an arc by the subtree introduced by a new site.

        The regular case gives three leaves (old, new, old) joined by two
        breakpoints whose half-edges start on the old parabola right above the
        new site and grow away from each other along the bisector. When both
        sites lie on the sweep line the bisector is vertical and a single
        breakpoint separates the old and new arcs.

        Args:
            arc: Index of the arc to split
            cell: Cell of the new site

        Returns:
            The two outer arcs of the new subtree (candidates for circle events)
        """
        alpha = self._nodes[arc]
        if not alpha.is_arc:
            raise BeachLineError(f"Node {arc} is not an arc")
        if alpha.event is not None:
            raise BeachLineError(f"Arc {arc} still references a circle event")

        old_cell = alpha.cell
        site = cell.site
        old_site = old_cell.site

        if abs(site.y - old_site.y) < EPSILON:
            return self._split_on_sweep_line(arc, old_cell, cell)

        start = Vector(site.x, parabola_y(old_site, site.x, site.y))
        offset = site - old_site
        left_edge = HalfEdge(start, offset.perpendicular())
        right_edge = HalfEdge(start, -offset.perpendicular())
        self.twins[left_edge] = right_edge
        self.twins[right_edge] = left_edge

        left_bp = self._new_breakpoint(left_edge, old_cell, cell)
        right_bp = self._new_breakpoint(right_edge, cell, old_cell)

        left_arc = self._new_arc(old_cell)
        middle_arc = self._new_arc(cell)
        right_arc = self._new_arc(old_cell)

        self._set_left(left_bp, left_arc)
        self._set_right(left_bp, right_bp)
        self._set_left(right_bp, middle_arc)
        self._set_right(right_bp, right_arc)

        self._replace(arc, left_bp)
        return left_arc, right_arc

    def _split_on_sweep_line(self, arc: int, old_cell: VoronoiCell,
                             cell: VoronoiCell) -> Tuple[int, int]:
        old_site = old_cell.site
        site = cell.site
        far_y = self.box.top + (self.box.width + self.box.height) * FAR_FACTOR
        start = Vector((site.x + old_site.x) / 2, max(far_y, site.y + 1.0))
        half_edge = HalfEdge(start, Vector(0.0, -1.0))

        old_arc = self._new_arc(old_cell)
        new_arc = self._new_arc(cell)
        if site.x >= old_site.x:
            left, right = old_arc, new_arc
        else:
            left, right = new_arc, old_arc

        bp = self._new_breakpoint(
            half_edge, self._nodes[left].cell, self._nodes[right].cell
        )
        self._set_left(bp, left)
        self._set_right(bp, right)
        self._replace(arc, bp)

        logger.debug("Split arc on the sweep line", site=tuple(site), other=tuple(old_site))
        return left, right

    def remove(self, arc: int) -> None:
        """
        Unlink an arc and its parent breakpoint.

        The sibling of the arc takes the place of the parent; when the parent
        is the root the sibling becomes the new root.
        """
        node = self._nodes[arc]
        if not node.is_arc:
            raise BeachLineError(f"Node {arc} is not an arc")
        parent = node.parent
        if parent == NIL:
            raise BeachLineError("Cannot remove the only arc of the beach line")

        parent_node = self._nodes[parent]
        sibling = parent_node.right if parent_node.left == arc else parent_node.left
        self._replace(parent, sibling)

        node.parent = NIL
        parent_node.left = NIL
        parent_node.right = NIL

    def determine_higher(self, arc: int, bp1: int, bp2: int) -> int:
        """
        Of the two breakpoints bounding an arc, the one closer to the root.

        Raises:
            BeachLineError: If neither breakpoint is an ancestor of the arc
        """
        higher = NIL
        index = self._nodes[arc].parent
        while index != NIL:
            if index == bp1 or index == bp2:
                higher = index
            index = self._nodes[index].parent
        if higher == NIL:
            raise BeachLineError(
                f"Neither breakpoint {bp1} nor {bp2} is an ancestor of arc {arc}"
            )
        return higher

    def end_edges(self) -> List[TracedEdge]:
        """Bound every half-edge still open on the beach line to the box."""
        edges = []
        for index in self.breakpoints():
            node = self._nodes[index]
            edge = clip_ray(node.half_edge, self.box)
            if edge is not None:
                edges.append(TracedEdge(edge, node.half_edge, node.left_cell, node.right_cell))
        return edges

    def check_invariants(self) -> None:
        """
        Verify the tree shape: arcs are leaves, breakpoints have two children
        and every child points back to its parent.

        Raises:
            BeachLineError: On the first violation found
        """
        if self._nodes[self.root].parent != NIL:
            raise BeachLineError("Root has a parent")
        stack = [self.root]
        while stack:
            index = stack.pop()
            node = self._nodes[index]
            if node.is_arc:
                if node.left != NIL or node.right != NIL:
                    raise BeachLineError(f"Arc {index} has children")
                continue
            if node.left == NIL or node.right == NIL:
                raise BeachLineError(f"Breakpoint {index} lacks a child")
            for child in (node.left, node.right):
                if self._nodes[child].parent != index:
                    raise BeachLineError(f"Node {child} does not point back to {index}")
                stack.append(child)
