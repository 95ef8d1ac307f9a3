"""
Interaction Engine: decisions, single-level undo, and match trials.

Per-candidate state machine, scoped to a session:

    Unseen → (Favor | Pass | Defer) → [single undo] → Unseen

INVARIANTS:
- Only the queue's current candidate can be decided
- decided_ids only grows, except for the single undo
- At most one decision is retained for undo; undo consumes it
- Sequence numbers are monotonic per engine, never wall-clock
- Notifications go out only after state is committed
"""

import logging
from collections import Counter
from dataclasses import dataclass, field

from vibewave.discovery.events import DiscoveryListener, NullListener
from vibewave.discovery.matching import MatchPolicy
from vibewave.discovery.queue import DiscoveryQueue
from vibewave.discovery.store import CandidateStore
from vibewave.models.candidate import Candidate
from vibewave.models.criteria import CriteriaSnapshot
from vibewave.models.decision import DecisionRecord, Outcome
from vibewave.models.failure import (
    CandidateNoLongerEligibleError,
    InvalidCandidateError,
    InvalidOutcomeError,
    NothingToUndoError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecisionResult:
    """What happened as a result of a single decision."""

    record: DecisionRecord
    matched: bool
    exhausted: bool
    next_candidate: Candidate | None


@dataclass
class EngineState:
    """Mutable per-session engine state."""

    decided_ids: set[str] = field(default_factory=set)
    last_decision: DecisionRecord | None = None
    next_sequence: int = 0
    history: list[DecisionRecord] = field(default_factory=list)


def coerce_outcome(outcome: Outcome | str) -> Outcome:
    """
    Validate a decision outcome at the engine boundary.

    Raises:
        InvalidOutcomeError: If outcome is not a known Outcome value
    """
    if isinstance(outcome, Outcome):
        return outcome
    try:
        return Outcome(str(outcome).strip().lower())
    except ValueError as e:
        raise InvalidOutcomeError(outcome) from e


class InteractionEngine:
    """
    Records decisions against the discovery queue.

    The engine reads the store and the criteria snapshot it is given; it
    does not own either. Callers rebuild it whenever either changes.
    """

    def __init__(
        self,
        store: CandidateStore,
        queue: DiscoveryQueue,
        match_policy: MatchPolicy | None = None,
        listener: DiscoveryListener | None = None,
        criteria: CriteriaSnapshot | None = None,
    ) -> None:
        self.store = store
        self.queue = queue
        self.match_policy = match_policy or MatchPolicy()
        self.listener: DiscoveryListener = listener or NullListener()
        self.criteria = criteria or CriteriaSnapshot()
        self.state = EngineState()

    @property
    def decided_ids(self) -> frozenset[str]:
        return frozenset(self.state.decided_ids)

    @property
    def last_decision(self) -> DecisionRecord | None:
        return self.state.last_decision

    @property
    def history(self) -> list[DecisionRecord]:
        return list(self.state.history)

    def decision_counts(self) -> dict[Outcome, int]:
        """Number of decisions per outcome this session (undone ones excluded)."""
        counts = Counter(r.outcome for r in self.state.history)
        return {outcome: counts.get(outcome, 0) for outcome in Outcome}

    # =========================================================================
    # QUEUE MAINTENANCE
    # =========================================================================

    def rebuild(self, criteria: CriteriaSnapshot | None = None) -> bool:
        """
        Rebuild the queue against the store and the existing decided ids.

        Returns:
            True if the queue just became exhausted
        """
        if criteria is not None:
            self.criteria = criteria

        exhausted = self.queue.rebuild(self.store.candidates, self.criteria, self.state.decided_ids)
        if exhausted:
            self.listener.on_queue_exhausted()
        return exhausted

    def reset(self) -> bool:
        """
        Clear all session decisions and rebuild from scratch.

        Used after the store has been replaced. The sequence counter keeps
        counting so records stay ordered across refreshes.
        """
        self.state.decided_ids.clear()
        self.state.last_decision = None
        self.state.history.clear()
        self.queue.reset()
        return self.rebuild()

    # =========================================================================
    # DECISIONS
    # =========================================================================

    def decide(self, candidate_id: str, outcome: Outcome | str) -> DecisionResult:
        """
        Record a decision for the current candidate and advance the cursor.

        Args:
            candidate_id: Must be the queue's current candidate
            outcome: Favor, Pass or Defer (enum or its string value)

        Returns:
            DecisionResult with the record, match flag and next candidate

        Raises:
            InvalidCandidateError: If candidate_id is not the current candidate
            InvalidOutcomeError: If outcome is not a known outcome
        """
        verdict = coerce_outcome(outcome)
        current = self.queue.current_candidate()
        if current is None or current.id != candidate_id:
            raise InvalidCandidateError(candidate_id, current.id if current else None)

        record = DecisionRecord(
            candidate_id=candidate_id,
            outcome=verdict,
            decided_at_sequence=self.state.next_sequence,
        )
        self.state.next_sequence += 1
        self.state.decided_ids.add(candidate_id)
        self.state.last_decision = record
        self.state.history.append(record)

        exhausted = self.queue.advance(self.state.decided_ids)

        # Advisory only: never affects the decision itself
        matched = verdict == Outcome.FAVOR and self.match_policy.trial()

        logger.info(
            "decision_recorded",
            extra={
                "candidate_id": candidate_id,
                "outcome": verdict.value,
                "sequence": record.decided_at_sequence,
                "matched": matched,
                "remaining": len(self.queue.undecided),
            },
        )

        self.listener.on_decision_recorded(candidate_id, verdict)
        if matched:
            self.listener.on_match(candidate_id)
        if exhausted:
            self.listener.on_queue_exhausted()

        return DecisionResult(
            record=record,
            matched=matched,
            exhausted=exhausted,
            next_candidate=self.queue.current_candidate(),
        )

    def undo(self) -> DecisionRecord:
        """
        Revert the most recent decision.

        The candidate becomes undecided again and, when it still passes the
        current filters, is placed back under the cursor.

        Returns:
            The decision that was undone

        Raises:
            NothingToUndoError: If no decision is retained
            CandidateNoLongerEligibleError: The undo was committed, but the
                candidate is filtered out and cannot be shown
        """
        record = self.state.last_decision
        if record is None:
            raise NothingToUndoError()

        self.state.decided_ids.discard(record.candidate_id)
        self.state.last_decision = None
        if self.state.history and self.state.history[-1] == record:
            self.state.history.pop()

        # A smaller decided set over the same criteria cannot newly empty the queue
        self.queue.rebuild(self.store.candidates, self.criteria, self.state.decided_ids)
        restored = self.queue.focus(record.candidate_id)

        logger.info(
            "decision_undone",
            extra={
                "candidate_id": record.candidate_id,
                "outcome": record.outcome.value,
                "restored": restored,
            },
        )

        if not restored:
            raise CandidateNoLongerEligibleError(record.candidate_id)

        return record
