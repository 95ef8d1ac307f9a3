"""
Candidate discovery queue and swipe interaction engine.

Store → filter → queue → projector for reads; decision → engine →
decided ids → cursor advance for writes. DiscoverySession ties them
together for one viewer.
"""

from vibewave.discovery.engine import DecisionResult, InteractionEngine
from vibewave.discovery.events import (
    DiscoveryEvent,
    DiscoveryListener,
    EventRecorder,
    EventType,
    NullListener,
)
from vibewave.discovery.matching import MatchPolicy
from vibewave.discovery.projector import MapPin, MapView, SwipeView, ViewProjector
from vibewave.discovery.queue import DiscoveryQueue
from vibewave.discovery.session import DiscoverySession
from vibewave.discovery.store import CandidateStore

__all__ = [
    "CandidateStore",
    "DecisionResult",
    "DiscoveryEvent",
    "DiscoveryListener",
    "DiscoveryQueue",
    "DiscoverySession",
    "EventRecorder",
    "EventType",
    "InteractionEngine",
    "MapPin",
    "MapView",
    "MatchPolicy",
    "NullListener",
    "SwipeView",
    "ViewProjector",
]
