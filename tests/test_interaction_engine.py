"""
Tests for the Interaction Engine.

These tests verify:
1. Only the current candidate can be decided
2. decided_ids strictly grows without undo
3. Single-level undo restores the pre-decision state
4. Undo of a filtered-out candidate is committed but signaled
5. Match trials are driven by the injected random source
6. Notifications fire after commit, exhaustion exactly once
"""

import random
from unittest.mock import MagicMock

import pytest

from vibewave.discovery.engine import InteractionEngine, coerce_outcome
from vibewave.discovery.events import EventRecorder, EventType
from vibewave.discovery.matching import MatchPolicy
from vibewave.discovery.queue import DiscoveryQueue
from vibewave.discovery.store import CandidateStore
from vibewave.models.candidate import Candidate
from vibewave.models.criteria import CriteriaSnapshot
from vibewave.models.decision import Outcome
from vibewave.models.failure import (
    CandidateNoLongerEligibleError,
    FailureKind,
    InvalidCandidateError,
    InvalidOutcomeError,
    NothingToUndoError,
)

# =============================================================================
# FIXTURES
# =============================================================================


def _engine(
    candidates: list[Candidate],
    *,
    probability: float = 0.0,
    criteria: CriteriaSnapshot | None = None,
    recorder: EventRecorder | None = None,
) -> InteractionEngine:
    engine = InteractionEngine(
        CandidateStore(candidates),
        DiscoveryQueue(),
        match_policy=MatchPolicy(probability, random.Random(42)),
        listener=recorder,
        criteria=criteria,
    )
    engine.rebuild()
    return engine


@pytest.fixture
def engine(sample_candidates: list[Candidate], recorder: EventRecorder) -> InteractionEngine:
    return _engine(sample_candidates, recorder=recorder)


# =============================================================================
# DECIDE
# =============================================================================


class TestDecide:
    def test_decide_records_and_advances(self, engine: InteractionEngine) -> None:
        """A decision is recorded and the next candidate becomes current."""
        result = engine.decide("jessie", Outcome.PASS)

        assert result.record.candidate_id == "jessie"
        assert result.record.outcome == Outcome.PASS
        assert result.next_candidate.id == "mike"
        assert engine.decided_ids == {"jessie"}
        assert engine.last_decision == result.record

    def test_decide_accepts_string_outcome(self, engine: InteractionEngine) -> None:
        """String outcomes are validated into the Outcome enum."""
        result = engine.decide("jessie", "Defer")
        assert result.record.outcome == Outcome.DEFER

    def test_invalid_outcome_rejected(self, engine: InteractionEngine) -> None:
        """Unknown outcomes fail before any state changes."""
        with pytest.raises(InvalidOutcomeError) as exc_info:
            engine.decide("jessie", "superlike")

        assert exc_info.value.kind == FailureKind.INVALID_INPUT
        assert engine.decided_ids == frozenset()
        assert engine.queue.current_candidate().id == "jessie"

    def test_non_current_candidate_rejected(self, engine: InteractionEngine) -> None:
        """Deciding anyone but the current candidate is a caller desync."""
        with pytest.raises(InvalidCandidateError) as exc_info:
            engine.decide("mike", Outcome.FAVOR)

        assert exc_info.value.current_id == "jessie"
        assert exc_info.value.status_code == 409
        assert engine.last_decision is None

    def test_deciding_twice_fails(self, engine: InteractionEngine) -> None:
        """The same id cannot be decided twice without undo."""
        engine.decide("jessie", Outcome.PASS)

        with pytest.raises(InvalidCandidateError):
            engine.decide("jessie", Outcome.FAVOR)

    def test_decided_ids_strictly_grow(self, engine: InteractionEngine) -> None:
        """Each successful decide adds exactly one id."""
        sizes = []
        while (current := engine.queue.current_candidate()) is not None:
            engine.decide(current.id, Outcome.DEFER)
            sizes.append(len(engine.decided_ids))

        assert sizes == [1, 2, 3, 4, 5]

    def test_sequence_is_monotonic(self, engine: InteractionEngine) -> None:
        """Each record gets a larger sequence number than the previous one."""
        first = engine.decide("jessie", Outcome.PASS).record
        second = engine.decide("mike", Outcome.PASS).record
        assert second.decided_at_sequence > first.decided_at_sequence

    def test_decide_on_empty_queue(self, sample_candidates: list[Candidate]) -> None:
        """With nothing undecided, every decide is an InvalidCandidate."""
        engine = _engine(sample_candidates, criteria=CriteriaSnapshot(age_min=90))

        with pytest.raises(InvalidCandidateError) as exc_info:
            engine.decide("jessie", Outcome.PASS)

        assert exc_info.value.current_id is None


# =============================================================================
# UNDO
# =============================================================================


class TestUndo:
    def test_undo_restores_previous_state(self, engine: InteractionEngine) -> None:
        """Undo right after decide puts the same candidate back under the cursor."""
        engine.decide("jessie", Outcome.PASS)

        undone = engine.undo()

        assert undone.candidate_id == "jessie"
        assert engine.decided_ids == frozenset()
        assert engine.last_decision is None
        assert engine.queue.current_candidate().id == "jessie"
        assert engine.queue.cursor == 0

    def test_undo_mid_queue(self, engine: InteractionEngine) -> None:
        """Undo restores a candidate in the middle of the list."""
        engine.decide("jessie", Outcome.PASS)
        engine.decide("mike", Outcome.FAVOR)

        engine.undo()

        assert engine.queue.current_candidate().id == "mike"
        assert engine.decided_ids == {"jessie"}

    def test_undo_without_decision_fails(self, engine: InteractionEngine) -> None:
        """Nothing decided → NothingToUndo."""
        with pytest.raises(NothingToUndoError):
            engine.undo()

    def test_second_undo_fails(self, engine: InteractionEngine) -> None:
        """Only one level of undo is kept."""
        engine.decide("jessie", Outcome.PASS)
        engine.decide("mike", Outcome.PASS)
        engine.undo()

        with pytest.raises(NothingToUndoError):
            engine.undo()

        assert engine.decided_ids == {"jessie"}

    def test_undo_then_decide_again(self, engine: InteractionEngine) -> None:
        """After undo the candidate can be decided with a different outcome."""
        engine.decide("jessie", Outcome.PASS)
        engine.undo()

        result = engine.decide("jessie", Outcome.FAVOR)

        assert result.record.outcome == Outcome.FAVOR
        assert engine.decision_counts()[Outcome.PASS] == 0
        assert engine.decision_counts()[Outcome.FAVOR] == 1

    def test_undo_after_exhaustion(self, engine: InteractionEngine) -> None:
        """Undoing the last decision revives an exhausted queue."""
        for candidate_id in ["jessie", "mike", "sarah", "david", "alex"]:
            engine.decide(candidate_id, Outcome.PASS)
        assert engine.queue.current_candidate() is None

        engine.undo()

        assert engine.queue.current_candidate().id == "alex"

    def test_undo_of_filtered_out_candidate(
        self, engine: InteractionEngine, recorder: EventRecorder
    ) -> None:
        """Undo is committed, but the candidate is reported as no longer eligible."""
        engine.decide("jessie", Outcome.PASS)
        engine.rebuild(CriteriaSnapshot(gender_equals="man"))

        with pytest.raises(CandidateNoLongerEligibleError) as exc_info:
            engine.undo()

        assert exc_info.value.candidate_id == "jessie"
        assert "jessie" not in engine.decided_ids
        assert engine.last_decision is None
        assert engine.queue.current_candidate().id == "mike"

        # Restoring the filters shows jessie again
        engine.rebuild(CriteriaSnapshot())
        assert "jessie" in [c.id for c in engine.queue.undecided]

    def test_undo_never_signals_exhaustion(
        self, engine: InteractionEngine, recorder: EventRecorder
    ) -> None:
        """Undo only ever grows the undecided set, so exhaustion is not re-signaled."""
        for candidate_id in ["jessie", "mike", "sarah", "david", "alex"]:
            engine.decide(candidate_id, Outcome.PASS)
        assert recorder.count(EventType.QUEUE_EXHAUSTED) == 1

        engine.undo()

        assert recorder.count(EventType.QUEUE_EXHAUSTED) == 1
        assert engine.queue.is_exhausted is False

    def test_filtered_out_undo_on_empty_queue(
        self, engine: InteractionEngine, recorder: EventRecorder
    ) -> None:
        """An ineligible undo leaves an empty queue empty without a second signal."""
        for candidate_id in ["jessie", "mike", "sarah", "david", "alex"]:
            engine.decide(candidate_id, Outcome.PASS)
        engine.rebuild(CriteriaSnapshot(gender_equals="man"))

        with pytest.raises(CandidateNoLongerEligibleError):
            engine.undo()

        assert "alex" not in engine.decided_ids
        assert engine.queue.current_candidate() is None
        assert recorder.count(EventType.QUEUE_EXHAUSTED) == 1


# =============================================================================
# MATCH TRIALS
# =============================================================================


class TestMatching:
    def test_probability_one_always_matches(
        self, sample_candidates: list[Candidate], recorder: EventRecorder
    ) -> None:
        """Forced probability 1.0 → onMatch fires for a Favor."""
        engine = _engine(sample_candidates, probability=1.0, recorder=recorder)

        result = engine.decide("jessie", Outcome.FAVOR)

        assert result.matched is True
        assert recorder.count(EventType.MATCH) == 1
        assert recorder.events[-1].candidate_id == "jessie"

    def test_probability_zero_never_matches(
        self, sample_candidates: list[Candidate], recorder: EventRecorder
    ) -> None:
        """Forced probability 0.0 → no match event."""
        engine = _engine(sample_candidates, probability=0.0, recorder=recorder)

        result = engine.decide("jessie", Outcome.FAVOR)

        assert result.matched is False
        assert recorder.count(EventType.MATCH) == 0

    def test_pass_and_defer_never_trial(self, sample_candidates: list[Candidate]) -> None:
        """Only Favor decisions consult the random source."""
        policy = MagicMock(spec=MatchPolicy)
        engine = InteractionEngine(CandidateStore(sample_candidates), DiscoveryQueue(), policy)
        engine.rebuild()

        engine.decide("jessie", Outcome.PASS)
        engine.decide("mike", Outcome.DEFER)

        policy.trial.assert_not_called()

    def test_seeded_trials_are_reproducible(self) -> None:
        """Two policies with the same seed produce the same sequence."""
        first = MatchPolicy(0.5, random.Random(123))
        second = MatchPolicy(0.5, random.Random(123))
        assert [first.trial() for _ in range(20)] == [second.trial() for _ in range(20)]

    def test_probability_validated(self) -> None:
        """Probabilities outside [0, 1] are rejected."""
        with pytest.raises(ValueError):
            MatchPolicy(1.5)


# =============================================================================
# NOTIFICATIONS
# =============================================================================


class TestNotifications:
    def test_decision_recorded_event(
        self, engine: InteractionEngine, recorder: EventRecorder
    ) -> None:
        """Every decision produces a decision_recorded notification."""
        engine.decide("jessie", Outcome.DEFER)

        event = recorder.events[0]
        assert event.type == EventType.DECISION_RECORDED
        assert event.candidate_id == "jessie"
        assert event.outcome == Outcome.DEFER

    def test_exhaustion_scenario(self, recorder: EventRecorder) -> None:
        """verifiedOnly over [A, B] → decide(A, Pass) exhausts the queue."""
        candidates = [
            Candidate(id="A", age_years=20, distance_units=1.0, verified=True),
            Candidate(id="B", age_years=40, distance_units=2.0, verified=False),
        ]
        engine = _engine(
            candidates, criteria=CriteriaSnapshot(verified_only=True), recorder=recorder
        )
        assert [c.id for c in engine.queue.filtered] == ["A"]

        result = engine.decide("A", Outcome.PASS)

        assert result.exhausted is True
        assert engine.queue.undecided == []
        assert engine.queue.current_candidate() is None
        assert recorder.count(EventType.QUEUE_EXHAUSTED) == 1

    def test_exhaustion_fires_once_across_rebuilds(
        self, engine: InteractionEngine, recorder: EventRecorder
    ) -> None:
        """Rebuilding an already-empty queue does not repeat the signal."""
        for candidate_id in ["jessie", "mike", "sarah", "david", "alex"]:
            engine.decide(candidate_id, Outcome.PASS)

        engine.rebuild()
        engine.rebuild(CriteriaSnapshot(verified_only=True))

        assert recorder.count(EventType.QUEUE_EXHAUSTED) == 1

    def test_listener_called_after_commit(self, sample_candidates: list[Candidate]) -> None:
        """The listener observes the already-committed state."""
        seen: list[frozenset[str]] = []
        engine = _engine(sample_candidates)

        class StateListener:
            def on_queue_exhausted(self) -> None:
                pass

            def on_match(self, candidate_id: str) -> None:
                pass

            def on_decision_recorded(self, candidate_id: str, outcome: Outcome) -> None:
                seen.append(engine.decided_ids)

        engine.listener = StateListener()
        engine.decide("jessie", Outcome.PASS)

        assert seen == [frozenset({"jessie"})]


class TestOutcomeCoercion:
    @pytest.mark.parametrize("raw", ["favor", "FAVOR", " favor ", Outcome.FAVOR])
    def test_accepted_spellings(self, raw: str) -> None:
        assert coerce_outcome(raw) == Outcome.FAVOR

    def test_rejects_unknown(self) -> None:
        with pytest.raises(InvalidOutcomeError):
            coerce_outcome("like")


class TestDecisionCounts:
    def test_counts_per_outcome(self, engine: InteractionEngine) -> None:
        """Counts cover every outcome, including zeros."""
        engine.decide("jessie", Outcome.FAVOR)
        engine.decide("mike", Outcome.PASS)
        engine.decide("sarah", Outcome.PASS)

        assert engine.decision_counts() == {
            Outcome.FAVOR: 1,
            Outcome.PASS: 2,
            Outcome.DEFER: 0,
        }
