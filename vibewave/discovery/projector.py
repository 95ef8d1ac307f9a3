"""
View Projector: three presentations of one filter pass.

- Swipe view: undecided candidates only, one at a time (triage)
- Grid view: every filter-matching candidate, decided or not (browse)
- Map view: the grid set, restricted to candidates with a location

All three read the queue's filtered/undecided lists; none of them
re-evaluates the filters.
"""

from dataclasses import dataclass

from vibewave.discovery.queue import DiscoveryQueue
from vibewave.models.candidate import Candidate, Coordinate


@dataclass(frozen=True)
class SwipeView:
    """
    Sequential single-card presentation.

    position is 1-based ("Showing profile 2 of 5"); None when exhausted.
    """

    current: Candidate | None
    position: int | None
    remaining: int
    total_filtered: int

    @property
    def exhausted(self) -> bool:
        return self.current is None


@dataclass(frozen=True, slots=True)
class MapPin:
    candidate_id: str
    name: str
    location: Coordinate


@dataclass(frozen=True)
class MapView:
    """Spatial presentation of the filtered candidates."""

    pins: tuple[MapPin, ...]
    without_location: int
    show_viewer_location: bool


class ViewProjector:
    """Projects the discovery queue into swipe, grid and map shapes."""

    def __init__(self, queue: DiscoveryQueue) -> None:
        self.queue = queue

    def swipe_view(self) -> SwipeView:
        cursor = self.queue.cursor
        return SwipeView(
            current=self.queue.current_candidate(),
            position=cursor + 1 if cursor is not None else None,
            remaining=len(self.queue.undecided),
            total_filtered=len(self.queue.filtered),
        )

    def grid_view(self) -> list[Candidate]:
        return self.queue.filtered

    def map_view(self, show_viewer_location: bool = False) -> MapView:
        filtered = self.queue.filtered
        pins = tuple(
            MapPin(candidate_id=c.id, name=c.name, location=c.location)
            for c in filtered
            if c.location is not None
        )
        return MapView(
            pins=pins,
            without_location=len(filtered) - len(pins),
            show_viewer_location=show_viewer_location,
        )
