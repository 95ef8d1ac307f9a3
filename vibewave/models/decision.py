from dataclasses import dataclass
from enum import Enum


class Outcome(str, Enum):
    """The user's verdict on a candidate."""

    FAVOR = "favor"
    PASS = "pass"
    DEFER = "defer"


@dataclass(frozen=True, slots=True)
class DecisionRecord:
    """
    A single recorded decision.

    decided_at_sequence is a per-session monotonic counter, not a
    wall-clock timestamp, so "most recent" is never ambiguous.
    """

    candidate_id: str
    outcome: Outcome
    decided_at_sequence: int
