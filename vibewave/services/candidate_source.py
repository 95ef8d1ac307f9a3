"""
Candidate sources: the data-access side of discovery.

Every source exposes `async load_candidates()`. Failures of any kind
surface as LoadFailedError; sources never retry on their own.

- DemoCandidateSource: bundled sample profiles, with a simulated fetch delay
- HttpCandidateSource: a remote profile service reached over httpx
- StaticCandidateSource: an in-memory list supplied by the caller
"""

import asyncio
import json
from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol

import httpx
from pydantic import BaseModel, Field, ValidationError

from vibewave.config import settings
from vibewave.models.candidate import Candidate, Coordinate
from vibewave.models.failure import LoadFailedError

# Bundled sample profiles (package data)
DEMO_CANDIDATES_PATH = Path(__file__).parent.parent / "data" / "sample_candidates.json"


class CandidateSource(Protocol):
    """Supplies the full, unfiltered candidate set."""

    name: str

    async def load_candidates(self) -> list[Candidate]: ...


# =============================================================================
# PAYLOAD VALIDATION
# =============================================================================


class CoordinatePayload(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class CandidatePayload(BaseModel):
    """Wire shape of a candidate profile, as served by a profile source."""

    id: str = Field(min_length=1)
    age: int = Field(ge=0)
    distance: float = Field(ge=0)
    gender: str | None = None
    interests: list[str] = Field(default_factory=list)
    verified: bool = False
    location: CoordinatePayload | None = None
    name: str = ""
    bio: str = ""
    image_url: str | None = None
    common_events: int = Field(default=0, ge=0)

    def to_candidate(self) -> Candidate:
        return Candidate(
            id=self.id,
            age_years=self.age,
            distance_units=self.distance,
            gender_label=self.gender,
            interest_tags=tuple(self.interests),
            verified=self.verified,
            location=(
                Coordinate(self.location.latitude, self.location.longitude)
                if self.location
                else None
            ),
            name=self.name,
            bio=self.bio,
            image_url=self.image_url,
            common_events=self.common_events,
        )


def parse_candidates(raw: Any, source: str) -> list[Candidate]:
    """
    Validate a raw JSON payload into candidates.

    Accepts either a bare list or an object with a "candidates" list.

    Raises:
        LoadFailedError: If the payload is malformed
    """
    if isinstance(raw, dict):
        raw = raw.get("candidates")
    if not isinstance(raw, list):
        raise LoadFailedError(source, "payload is not a list of candidates")

    try:
        return [CandidatePayload.model_validate(item).to_candidate() for item in raw]
    except ValidationError as e:
        raise LoadFailedError(source, f"invalid candidate: {e.error_count()} error(s)") from e


# =============================================================================
# SOURCES
# =============================================================================


class StaticCandidateSource:
    """Serves a fixed, caller-supplied list of candidates."""

    name = "static"

    def __init__(self, candidates: Iterable[Candidate]) -> None:
        self.candidates = list(candidates)

    async def load_candidates(self) -> list[Candidate]:
        return list(self.candidates)


@lru_cache(maxsize=1)
def _load_demo_payload(path: Path) -> tuple[Candidate, ...]:
    """
    Load the demo profiles from JSON.

    Cached after first load (demo data is read-only).
    """
    if not path.exists():
        raise LoadFailedError("demo", f"sample file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise LoadFailedError("demo", f"sample file is not valid JSON: {e.msg}") from e

    return tuple(parse_candidates(raw, "demo"))


class DemoCandidateSource:
    """
    Bundled sample profiles for demo mode.

    Waits delay_seconds before answering to mimic a network fetch.
    """

    name = "demo"

    def __init__(self, path: Path | None = None, delay_seconds: float | None = None) -> None:
        self.path = path or DEMO_CANDIDATES_PATH
        self.delay_seconds = (
            settings.refresh_delay_seconds if delay_seconds is None else delay_seconds
        )

    async def load_candidates(self) -> list[Candidate]:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)
        return list(_load_demo_payload(self.path))


class HttpCandidateSource:
    """
    Client for a remote profile service.

    Expects GET {base_url}/candidates to return a JSON list of profiles.
    """

    name = "http"

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        self.base_url = (base_url or settings.candidate_source_url).rstrip("/")
        self.timeout = timeout or settings.candidate_source_timeout

    async def load_candidates(self) -> list[Candidate]:
        """
        Fetch candidates from the remote service.

        Raises:
            LoadFailedError: On transport errors, non-2xx responses or bad payloads
        """
        if not self.base_url:
            raise LoadFailedError(self.name, "no candidate source URL configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.base_url}/candidates")
                response.raise_for_status()
                raw = response.json()
        except httpx.HTTPStatusError as e:
            raise LoadFailedError(self.name, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise LoadFailedError(self.name, type(e).__name__) from e
        except ValueError as e:
            raise LoadFailedError(self.name, "response is not valid JSON") from e

        return parse_candidates(raw, self.name)


def get_candidate_source() -> CandidateSource:
    """Build the candidate source selected by settings.candidate_source."""
    if settings.candidate_source == "http":
        return HttpCandidateSource()
    return DemoCandidateSource()
