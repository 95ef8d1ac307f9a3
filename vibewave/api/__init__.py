from vibewave.api.discovery import router as discovery_router
from vibewave.api.health import router as health_router

__all__ = [
    "discovery_router",
    "health_router",
]
