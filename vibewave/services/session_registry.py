"""
Session Registry: in-memory DiscoverySession hosting for the HTTP service.

Each viewer session gets its own DiscoverySession and its own asyncio.Lock.
Requests for the same session are serialized through `claim()`, so the
engine always has a single writer even when requests arrive concurrently.

Only claims made with create=True (refresh, filters) start a session;
every other access to an unknown id fails with SessionNotFoundError, so
read traffic cannot grow the registry.

INVARIANTS:
- One DiscoverySession per session id
- All access to a session goes through its lock, including discard
- A lock is only honored while it is the registered lock for its id
- Sessions live in memory only; nothing is persisted
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from vibewave.discovery.events import EventRecorder
from vibewave.discovery.session import DiscoverySession
from vibewave.models.failure import SessionNotFoundError
from vibewave.services.candidate_source import CandidateSource, get_candidate_source

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    Holds live discovery sessions keyed by session id.

    Args:
        source_factory: Builds the candidate source for each new session
    """

    def __init__(
        self,
        source_factory: Callable[[], CandidateSource] = get_candidate_source,
    ) -> None:
        self._source_factory = source_factory
        self._sessions: dict[str, DiscoverySession] = {}
        self._recorders: dict[str, EventRecorder] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _get_or_create(self, session_id: str) -> DiscoverySession:
        if session_id not in self._sessions:
            recorder = EventRecorder()
            self._recorders[session_id] = recorder
            self._sessions[session_id] = DiscoverySession(
                self._source_factory(),
                listener=recorder,
                session_id=session_id,
            )
            logger.info("discovery_session_created", extra={"session_id": session_id})
        return self._sessions[session_id]

    @asynccontextmanager
    async def claim(
        self, session_id: str, *, create: bool = True
    ) -> AsyncIterator[DiscoverySession]:
        """
        Acquire exclusive access to a session.

        Usage:
            async with registry.claim("user-1") as session:
                session.decide(...)

        Args:
            session_id: Session identifier
            create: Start the session on first use; otherwise it must exist

        Raises:
            SessionNotFoundError: If create is False and the session is unknown
        """
        while True:
            if not create and session_id not in self._sessions:
                raise SessionNotFoundError(session_id)

            lock = self._locks.setdefault(session_id, asyncio.Lock())
            async with lock:
                # Discarded while we waited: queue up on the current lock instead
                if self._locks.get(session_id) is not lock:
                    continue
                if not create and session_id not in self._sessions:
                    raise SessionNotFoundError(session_id)

                yield self._get_or_create(session_id)
                return

    def recorder(self, session_id: str) -> EventRecorder:
        """
        Event recorder attached to an existing session.

        Raises:
            SessionNotFoundError: If the session is unknown
        """
        recorder = self._recorders.get(session_id)
        if recorder is None:
            raise SessionNotFoundError(session_id)
        return recorder

    async def discard(self, session_id: str) -> bool:
        """
        Drop a session once its current holder releases it.

        Returns:
            True if the session existed
        """
        while True:
            lock = self._locks.get(session_id)
            if lock is None:
                return False

            async with lock:
                if self._locks.get(session_id) is not lock:
                    continue
                del self._locks[session_id]
                self._recorders.pop(session_id, None)
                existed = self._sessions.pop(session_id, None) is not None

            if existed:
                logger.info("discovery_session_discarded", extra={"session_id": session_id})
            return existed

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


# Default registry instance
_registry: SessionRegistry | None = None


def get_session_registry() -> SessionRegistry:
    """
    Get the default session registry.

    Returns:
        Singleton SessionRegistry used by the API
    """
    global _registry
    if _registry is None:
        _registry = SessionRegistry()
    return _registry


def reset_session_registry() -> None:
    """Drop the default registry (for testing)."""
    global _registry
    _registry = None
