"""
Outbound notifications from the discovery engine to the presentation layer.

Listeners are told about decisions, matches and queue exhaustion after
the engine state has been committed. The engine never waits on them, and
presentation delays (toasts, match animations) belong to the listener.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from vibewave.models.decision import Outcome


class DiscoveryListener(Protocol):
    """Receives engine notifications."""

    def on_queue_exhausted(self) -> None: ...

    def on_match(self, candidate_id: str) -> None: ...

    def on_decision_recorded(self, candidate_id: str, outcome: Outcome) -> None: ...


class NullListener:
    """Listener that ignores every notification."""

    def on_queue_exhausted(self) -> None:
        pass

    def on_match(self, candidate_id: str) -> None:
        pass

    def on_decision_recorded(self, candidate_id: str, outcome: Outcome) -> None:
        pass


class EventType(str, Enum):
    QUEUE_EXHAUSTED = "queue_exhausted"
    MATCH = "match"
    DECISION_RECORDED = "decision_recorded"


@dataclass(frozen=True, slots=True)
class DiscoveryEvent:
    """A recorded notification."""

    type: EventType
    candidate_id: str | None = None
    outcome: Outcome | None = None


class EventRecorder:
    """
    Listener that keeps notifications in arrival order.

    The HTTP layer drains it after each request to return the events
    alongside the response.
    """

    def __init__(self) -> None:
        self.events: list[DiscoveryEvent] = []

    def on_queue_exhausted(self) -> None:
        self.events.append(DiscoveryEvent(EventType.QUEUE_EXHAUSTED))

    def on_match(self, candidate_id: str) -> None:
        self.events.append(DiscoveryEvent(EventType.MATCH, candidate_id=candidate_id))

    def on_decision_recorded(self, candidate_id: str, outcome: Outcome) -> None:
        self.events.append(
            DiscoveryEvent(EventType.DECISION_RECORDED, candidate_id=candidate_id, outcome=outcome)
        )

    def count(self, event_type: EventType) -> int:
        return sum(1 for e in self.events if e.type == event_type)

    def drain(self) -> list[DiscoveryEvent]:
        """Return and clear recorded events."""
        events, self.events = self.events, []
        return events
