"""
DiscoverySession: one viewer's browsing session.

A DiscoverySession is an explicit object owned by its caller. It wires the
candidate store, discovery queue, interaction engine and view projector
together and adds the refresh-in-flight guard. There is no module-level
session: several sessions (e.g. test fixtures for different users) can
coexist.

INVARIANTS:
- decide() and undo() never run against a queue that is being refreshed
- A failed refresh leaves the previous store and decisions untouched
- Changing filters keeps the decided ids
"""

import logging
import random

from vibewave.config import settings
from vibewave.discovery.engine import DecisionResult, InteractionEngine
from vibewave.discovery.events import DiscoveryListener
from vibewave.discovery.matching import MatchPolicy
from vibewave.discovery.projector import MapView, SwipeView, ViewProjector
from vibewave.discovery.queue import DiscoveryQueue
from vibewave.discovery.store import CandidateStore
from vibewave.models.candidate import Candidate
from vibewave.models.criteria import CriteriaSnapshot, FilterCriteria
from vibewave.models.decision import DecisionRecord, Outcome
from vibewave.models.failure import LoadFailedError, RefreshInProgressError
from vibewave.services.candidate_source import CandidateSource

logger = logging.getLogger(__name__)


class DiscoverySession:
    """
    Candidate discovery and swipe interaction for a single viewer.

    Args:
        source: Data-access collaborator that supplies candidates
        criteria: Initial filter criteria (no filtering when omitted)
        listener: Receives decision, match and exhaustion notifications
        rng: Random source for reshuffling and match trials
        match_probability: Overrides settings.match_probability
        session_id: Identifier used in log records
    """

    def __init__(
        self,
        source: CandidateSource,
        *,
        criteria: FilterCriteria | CriteriaSnapshot | None = None,
        listener: DiscoveryListener | None = None,
        rng: random.Random | None = None,
        match_probability: float | None = None,
        session_id: str = "local",
    ) -> None:
        self.session_id = session_id
        self.source = source
        self.rng = rng or random.Random(settings.random_seed)

        probability = (
            settings.match_probability if match_probability is None else match_probability
        )

        self.store = CandidateStore()
        self.queue = DiscoveryQueue()
        self.engine = InteractionEngine(
            self.store,
            self.queue,
            match_policy=MatchPolicy(probability, self.rng),
            listener=listener,
            criteria=_snapshot(criteria),
        )
        self.projector = ViewProjector(self.queue)
        self._refreshing = False

    # =========================================================================
    # REFRESH
    # =========================================================================

    @property
    def is_refreshing(self) -> bool:
        return self._refreshing

    async def reshuffle(self) -> int:
        """
        Reload candidates from the source in a new random order.

        Clears decided ids and the undoable decision, then rebuilds the
        queue from the start.

        Returns:
            Number of candidates now in the store

        Raises:
            RefreshInProgressError: If a refresh is already running
            LoadFailedError: If the source fails; previous state is kept
        """
        if self._refreshing:
            raise RefreshInProgressError("reshuffle")

        self._refreshing = True
        logger.info("discovery_refresh_started", extra={"session_id": self.session_id})
        try:
            candidates = await self.source.load_candidates()
            self.store.reshuffle(candidates, self.rng)
        except LoadFailedError:
            logger.warning("discovery_refresh_failed", extra={"session_id": self.session_id})
            raise
        except ValueError as e:
            logger.warning("discovery_refresh_failed", extra={"session_id": self.session_id})
            raise LoadFailedError(self.source.name, str(e)) from e
        finally:
            self._refreshing = False

        self.engine.reset()
        logger.info(
            "discovery_refresh_completed",
            extra={"session_id": self.session_id, "candidates": len(self.store)},
        )
        return len(self.store)

    def _guard(self, operation: str) -> None:
        if self._refreshing:
            raise RefreshInProgressError(operation)

    # =========================================================================
    # WRITES
    # =========================================================================

    def decide(self, candidate_id: str, outcome: Outcome | str) -> DecisionResult:
        """Record a decision for the current candidate. See InteractionEngine.decide."""
        self._guard("decide")
        return self.engine.decide(candidate_id, outcome)

    def undo(self) -> DecisionRecord:
        """Undo the most recent decision. See InteractionEngine.undo."""
        self._guard("undo")
        return self.engine.undo()

    def apply_filters(self, criteria: FilterCriteria | CriteriaSnapshot) -> bool:
        """
        Snapshot new criteria and rebuild the queue.

        Decisions made so far are kept; only the undecided list changes.

        Returns:
            True if the queue just became exhausted
        """
        snapshot = _snapshot(criteria)
        logger.info(
            "discovery_filters_applied",
            extra={"session_id": self.session_id, "empty": snapshot.is_empty()},
        )
        return self.engine.rebuild(snapshot)

    # =========================================================================
    # READS
    # =========================================================================

    @property
    def criteria(self) -> CriteriaSnapshot:
        return self.engine.criteria

    @property
    def decided_ids(self) -> frozenset[str]:
        return self.engine.decided_ids

    @property
    def last_decision(self) -> DecisionRecord | None:
        return self.engine.last_decision

    def current_candidate(self) -> Candidate | None:
        return self.queue.current_candidate()

    def undecided(self) -> list[Candidate]:
        return self.queue.undecided

    def swipe_view(self) -> SwipeView:
        return self.projector.swipe_view()

    def grid_view(self) -> list[Candidate]:
        return self.projector.grid_view()

    def map_view(self, show_viewer_location: bool = False) -> MapView:
        return self.projector.map_view(show_viewer_location)

    def decision_counts(self) -> dict[Outcome, int]:
        return self.engine.decision_counts()


def _snapshot(criteria: FilterCriteria | CriteriaSnapshot | None) -> CriteriaSnapshot:
    if criteria is None:
        return CriteriaSnapshot()
    if isinstance(criteria, CriteriaSnapshot):
        return criteria
    return criteria.snapshot()
