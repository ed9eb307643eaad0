"""Sweep-line events and the priority queue that orders them."""

import heapq
import itertools
from dataclasses import dataclass, field
from typing import List, Tuple, Union

from .cell import VoronoiCell
from .geometry import Vector


@dataclass(eq=False)
class SiteEvent:
    """The sweep line reaches a site."""
    cell: VoronoiCell
    queued: bool = field(default=False, repr=False)

    @property
    def point(self) -> Vector:
        return self.cell.site


@dataclass(eq=False)
class CircleEvent:
    """
    Three consecutive arcs converge and the middle one disappears.

    `point` is the bottommost point of the circle through the three sites,
    `center` the Voronoi vertex created when the event fires and `arc` the
    beach line index of the arc that vanishes.
    """
    point: Vector
    center: Vector
    arc: int
    queued: bool = field(default=False, repr=False)


Event = Union[SiteEvent, CircleEvent]


def event_key(event: Event) -> Tuple[float, float]:
    """Sort key: decreasing y, ties broken by increasing x."""
    return (-event.point.y, event.point.x)


class EventQueue:
    """
    Min-heap over event_key with lazy removal.

    `remove` only clears the queued flag of an event; the entry stays in the
    heap and is discarded when it surfaces, so no removed event is ever
    returned by `pop`. Removal is O(1) and pop amortised O(log n).
    """

    def __init__(self):
        self._heap: List[tuple] = []
        self._counter = itertools.count()
        self._live = 0

    def __len__(self) -> int:
        return self._live

    def __bool__(self) -> bool:
        return self._live > 0

    def is_empty(self) -> bool:
        return self._live == 0

    def push(self, event: Event) -> None:
        if event.queued:
            raise ValueError(f"Event {event} is already queued")
        y_key, x_key = event_key(event)
        # The counter keeps the order strict for events sharing a point
        heapq.heappush(self._heap, (y_key, x_key, next(self._counter), event))
        event.queued = True
        self._live += 1

    def pop(self) -> Event:
        while self._heap:
            _, _, _, event = heapq.heappop(self._heap)
            if not event.queued:
                continue
            event.queued = False
            self._live -= 1
            return event
        raise IndexError("pop from an empty event queue")

    def remove(self, event: Event) -> None:
        """Withdraw a pending event. Removing a popped or removed event is a no-op."""
        if not event.queued:
            return
        event.queued = False
        self._live -= 1
