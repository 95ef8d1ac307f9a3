"""
Discovery Queue: ordered, undecided candidates and the swipe cursor.

The queue is derived state: it is recomputed from the candidate store,
the criteria snapshot and the session's decided ids. It never owns
decisions itself.

INVARIANTS:
- undecided == filtered minus decided ids, in store order (never re-sorted)
- cursor is None or a valid index into the CURRENT undecided list
- cursor is recomputed on every shape change, never blindly incremented
- exhaustion is reported exactly once per transition into emptiness
"""

import logging
from collections.abc import Collection, Sequence

from vibewave.filtering.criteria_filter import Criteria, filter_candidates
from vibewave.models.candidate import Candidate

logger = logging.getLogger(__name__)


class DiscoveryQueue:
    """Filtered view over the candidate store plus the sequential cursor."""

    def __init__(self) -> None:
        self._filtered: list[Candidate] = []
        self._undecided: list[Candidate] = []
        self._order: dict[str, int] = {}
        self._cursor: int | None = None
        self._exhausted = False

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def filtered(self) -> list[Candidate]:
        """All candidates passing the filters, regardless of decisions."""
        return list(self._filtered)

    @property
    def undecided(self) -> list[Candidate]:
        """Filtered candidates not yet decided this session."""
        return list(self._undecided)

    @property
    def cursor(self) -> int | None:
        return self._cursor

    @property
    def is_exhausted(self) -> bool:
        return not self._undecided

    def current_candidate(self) -> Candidate | None:
        """The candidate at the cursor, or None if nothing is undecided."""
        if self._cursor is None:
            return None
        return self._undecided[self._cursor]

    # =========================================================================
    # STATE CHANGES
    # =========================================================================

    def reset(self) -> None:
        """Forget the cursor and exhaustion state (store was replaced)."""
        self._filtered = []
        self._undecided = []
        self._order = {}
        self._cursor = None
        self._exhausted = False

    def rebuild(
        self,
        candidates: Sequence[Candidate],
        criteria: Criteria,
        decided_ids: Collection[str],
    ) -> bool:
        """
        Recompute filtered and undecided candidates.

        The cursor stays on the current candidate when it is still
        undecided. Otherwise it moves to the next undecided candidate after
        it in store order, wrapping to the start.

        Args:
            candidates: Store contents in presentation order
            criteria: Filter criteria snapshot
            decided_ids: Ids decided this session

        Returns:
            True if this rebuild moved the queue into exhaustion
        """
        anchor = self.current_candidate()

        self._order = {c.id: i for i, c in enumerate(candidates)}
        self._filtered = filter_candidates(candidates, criteria)
        self._undecided = [c for c in self._filtered if c.id not in decided_ids]

        if anchor is None:
            self._cursor = 0 if self._undecided else None
        else:
            self._cursor = self._resolve_cursor(anchor.id, include_anchor=True)

        logger.debug(
            "discovery_queue_rebuilt",
            extra={
                "filtered": len(self._filtered),
                "undecided": len(self._undecided),
                "cursor": self._cursor,
            },
        )
        return self._sync_exhaustion()

    def advance(self, decided_ids: Collection[str]) -> bool:
        """
        Move the cursor past the current candidate.

        Picks the next undecided candidate after the current one, wrapping
        to the start of the list when the end is reached. When no undecided
        candidate remains anywhere, the cursor becomes None.

        Args:
            decided_ids: Ids decided this session, including any just recorded

        Returns:
            True if the queue just became exhausted
        """
        anchor = self.current_candidate()
        self._undecided = [c for c in self._filtered if c.id not in decided_ids]

        if anchor is None:
            self._cursor = 0 if self._undecided else None
        else:
            self._cursor = self._resolve_cursor(anchor.id, include_anchor=False)

        return self._sync_exhaustion()

    def focus(self, candidate_id: str) -> bool:
        """
        Place the cursor on an undecided candidate.

        Returns:
            True if the candidate is undecided and now current
        """
        for index, candidate in enumerate(self._undecided):
            if candidate.id == candidate_id:
                self._cursor = index
                self._exhausted = False
                return True
        return False

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _resolve_cursor(self, anchor_id: str, include_anchor: bool) -> int | None:
        """
        Find the cursor position relative to a previously current candidate.

        With include_anchor the anchor itself is kept when still undecided.
        Candidates no longer in the store restart from the beginning.
        """
        if not self._undecided:
            return None

        anchor_pos = self._order.get(anchor_id)
        if anchor_pos is None:
            return 0

        for index, candidate in enumerate(self._undecided):
            pos = self._order[candidate.id]
            if pos > anchor_pos or (include_anchor and pos == anchor_pos):
                return index

        # Nothing after the anchor: wrap to the start
        return 0

    def _sync_exhaustion(self) -> bool:
        if self._undecided:
            self._exhausted = False
            return False

        self._cursor = None
        if self._exhausted:
            return False

        self._exhausted = True
        logger.info("discovery_queue_exhausted", extra={"filtered": len(self._filtered)})
        return True
