"""
Voronoi diagram construction with Fortune's sweep-line algorithm.

Follows the algorithm of chapter 7 of de Berg et al., "Computational
Geometry: Algorithms and Applications". The sweep line moves from the top of
the box (largest y) downwards. Site events split arcs of the beach line,
circle events remove the arc squeezed between two converging breakpoints
and emit a Voronoi vertex. When the queue is exhausted the half-edges still
open on the beach line are clipped to the bounding box.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

import numpy as np
import structlog
from scipy.spatial import cKDTree

from .beach_line import NIL, BeachLine, TracedEdge
from .cell import CellGeometry, VoronoiCell
from .events import CircleEvent, EventQueue, SiteEvent
from .geometry import EPSILON, Edge, HalfEdge, Rectangle, Vector, ccw
from .intersection import clip_segment, intersect

logger = structlog.get_logger()


class BuilderState(Enum):
    RUNNING = "running"
    FINISHED = "finished"


@dataclass(frozen=True)
class VoronoiDiagram:
    """Result of one sweep: finalized cells and the edges bounded to the box."""
    box: Rectangle
    cells: Tuple[CellGeometry, ...]
    edges: Tuple[Edge, ...]
    site_event_count: int
    circle_event_count: int

    @property
    def sites(self) -> List[Vector]:
        return [cell.site for cell in self.cells]

    def centroids(self) -> List[Vector]:
        return [cell.centroid for cell in self.cells]

    def total_area(self) -> float:
        return sum(cell.area for cell in self.cells)

    def edges_array(self) -> np.ndarray:
        """Edges as an (E, 2, 2) array of endpoint coordinates."""
        if not self.edges:
            return np.empty((0, 2, 2))
        return np.array([[[e.v1.x, e.v1.y], [e.v2.x, e.v2.y]] for e in self.edges])


def unique_sites(sites: Iterable[Vector]) -> List[Vector]:
    """
    Sites with duplicates (epsilon equality) removed, first occurrence kept.

    Neighbours are found with a KD-tree query in the max norm, the metric of
    Vector equality, so near-equal sites collapse however they round.
    """
    points = [s if isinstance(s, Vector) else Vector(float(s[0]), float(s[1])) for s in sites]
    if not points:
        return []

    coords = np.array([p.as_array() for p in points])
    neighbours = cKDTree(coords).query_ball_point(coords, r=EPSILON, p=np.inf)

    result: List[Vector] = []
    dropped = set()
    for i, point in enumerate(points):
        if i in dropped:
            continue
        result.append(point)
        dropped.update(j for j in neighbours[i] if j > i and point == points[j])
    return result


class VoronoiBuilder:
    """
    Runs one sweep over a site set inside a bounding box.

    A builder owns its beach line, event queue, cells and edge list and is
    used once: `build()` drains the queue and returns the diagram.
    """

    def __init__(self, sites: Iterable[Vector], box: Rectangle):
        self.box = box
        self.cells = [VoronoiCell(site) for site in unique_sites(sites)]
        if not self.cells:
            raise ValueError("At least one site is required to build a Voronoi diagram")

        self.edges: List[Edge] = []
        self._traced: List[TracedEdge] = []
        self.events = EventQueue()
        self.beach_line: Optional[BeachLine] = None
        self.sweep_y = box.top
        self.state = BuilderState.RUNNING
        self.site_event_count = 0
        self.circle_event_count = 0

    def build(self) -> VoronoiDiagram:
        """
        Sweep all events and return the finished diagram.

        Raises:
            RuntimeError: If the builder already ran
        """
        if self.state is BuilderState.FINISHED:
            raise RuntimeError("This builder already produced its diagram")

        logger.debug("Starting sweep", sites=len(self.cells), box=repr(self.box))

        for cell in self.cells:
            self.events.push(SiteEvent(cell))

        while not self.events.is_empty():
            event = self.events.pop()
            self.sweep_y = event.point.y
            if isinstance(event, SiteEvent):
                self.site_event_count += 1
                self._handle_site(event.cell)
            else:
                self._handle_circle(event)

        self.beach_line.check_invariants()
        self._traced.extend(self.beach_line.end_edges())
        self._assemble_edges()
        self._attach_corners()
        self.state = BuilderState.FINISHED

        diagram = VoronoiDiagram(
            box=self.box,
            cells=tuple(cell.finalize() for cell in self.cells),
            edges=tuple(self.edges),
            site_event_count=self.site_event_count,
            circle_event_count=self.circle_event_count,
        )
        logger.debug("Sweep complete",
                     cells=len(diagram.cells),
                     edges=len(diagram.edges),
                     circle_events=self.circle_event_count)
        return diagram

    def _handle_site(self, cell: VoronoiCell) -> None:
        if self.beach_line is None:
            # First event of the sweep: the beach line is a single arc
            self.beach_line = BeachLine(self.box, cell)
            return

        arc = self.beach_line.arc_above(cell.site)
        self._discard_circle_event(arc)

        left_arc, right_arc = self.beach_line.split(arc, cell)

        self._check_circle_event(left_arc)
        self._check_circle_event(right_arc)

    def _handle_circle(self, event: CircleEvent) -> None:
        beach_line = self.beach_line
        gamma = event.arc
        if beach_line.node(gamma).event is not event:
            logger.debug("Skipping stale circle event", point=tuple(event.point))
            return
        beach_line.node(gamma).event = None
        self.circle_event_count += 1

        xl = beach_line.left_breakpoint_of(gamma)
        xr = beach_line.right_breakpoint_of(gamma)
        predecessor = beach_line.left_arc_of(xl)
        successor = beach_line.right_arc_of(xr)

        self._discard_circle_event(predecessor)
        self._discard_circle_event(successor)

        center = event.center
        for bp in (xl, xr):
            node = beach_line.node(bp)
            edge = self.boxed_edge(node.half_edge.head, center)
            if edge is not None:
                self._traced.append(TracedEdge(edge, node.half_edge, node.left_cell, node.right_cell))

        # The breakpoint closer to the root survives and traces the new bisector
        higher = beach_line.node(beach_line.determine_higher(gamma, xl, xr))
        pred_cell = beach_line.node(predecessor).cell
        succ_cell = beach_line.node(successor).cell
        direction = (succ_cell.site - pred_cell.site).perpendicular()
        higher.half_edge = HalfEdge(center, direction)
        higher.left_cell = pred_cell
        higher.right_cell = succ_cell

        beach_line.remove(gamma)

        self._check_circle_event(predecessor)
        self._check_circle_event(successor)

    def _check_circle_event(self, arc: int) -> None:
        """Queue the circle event of an arc if its two breakpoints converge below the sweep line."""
        beach_line = self.beach_line
        left_bp = beach_line.left_breakpoint_of(arc)
        right_bp = beach_line.right_breakpoint_of(arc)
        if left_bp == NIL or right_bp == NIL:
            return

        a = beach_line.node(beach_line.left_arc_of(left_bp)).cell.site
        b = beach_line.node(arc).cell.site
        c = beach_line.node(beach_line.right_arc_of(right_bp)).cell.site
        if a == c:
            return
        # Only clockwise triples converge; collinear ones have parallel bisectors
        if ccw(a, b, c) >= 0:
            return

        hits = intersect(beach_line.node(left_bp).half_edge,
                         beach_line.node(right_bp).half_edge)
        if not hits:
            return
        center = hits[0]

        bottom = Vector(center.x, center.y - center.distance_to(b))
        if bottom.y > self.sweep_y + EPSILON:
            return

        self._discard_circle_event(arc)
        event = CircleEvent(point=bottom, center=center, arc=arc)
        beach_line.node(arc).event = event
        self.events.push(event)

    def _discard_circle_event(self, arc: int) -> None:
        """Withdraw the pending circle event of an arc, a false alarm."""
        node = self.beach_line.node(arc)
        if node.event is not None:
            self.events.remove(node.event)
            node.event = None

    def boxed_edge(self, head: Vector, tail: Vector) -> Optional[Edge]:
        """Part of the edge head -> tail that fits the box, None when nothing remains."""
        return clip_segment(head, tail, self.box)

    def _assemble_edges(self) -> None:
        """
        Turn the traced half-edges into diagram edges and hand them to their cells.

        The two half-edges born from one arc split grow in opposite directions
        from the same start point; when both were traced from that point they
        are joined into a single edge.
        """
        traced = self._traced
        twins = self.beach_line.twins
        position = {t.half_edge: i for i, t in enumerate(traced)}
        merged = set()

        for i, item in enumerate(traced):
            if i in merged:
                continue
            merged.add(i)
            edge = item.edge

            twin = twins.get(item.half_edge)
            j = position.get(twin) if twin is not None else None
            if j is not None and j not in merged and traced[j].edge.v1 == edge.v1:
                edge = Edge(traced[j].edge.v2, edge.v2)
                merged.add(j)

            if edge.is_degenerate():
                continue
            self.edges.append(edge)
            item.left_cell.add_edge(edge)
            item.right_cell.add_edge(edge)

    def _attach_corners(self) -> None:
        """Give each box corner to the cell of its nearest site."""
        points = np.array([[cell.site.x, cell.site.y] for cell in self.cells])
        corners = self.box.corners
        tree = cKDTree(points)
        _, owners = tree.query(np.array([[c.x, c.y] for c in corners]))
        for corner, owner in zip(corners, np.atleast_1d(owners)):
            self.cells[int(owner)].add_corner(corner)


def build_voronoi(sites: Iterable[Vector], box: Rectangle) -> VoronoiDiagram:
    """Build the Voronoi diagram of a site set bounded by a box."""
    return VoronoiBuilder(sites, box).build()
