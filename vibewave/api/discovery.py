"""
Discovery API endpoints.

Exposes one DiscoverySession per session id: refresh, filters, the swipe,
grid and map views, decisions, undo and decision stats. Every response is
wrapped in the ApiResponse envelope; engine notifications raised while
handling a request are returned in its `events` list.

Only refresh and filters start a session; every other route answers
session_not_found (404) for an unknown id.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from vibewave.discovery.events import DiscoveryEvent
from vibewave.discovery.projector import SwipeView
from vibewave.models.candidate import Candidate
from vibewave.models.criteria import FilterCriteria
from vibewave.models.decision import DecisionRecord, Outcome
from vibewave.models.failure import ApiResponse, create_success
from vibewave.services.session_registry import SessionRegistry, get_session_registry

router = APIRouter(prefix="/discovery", tags=["discovery"])

Registry = Annotated[SessionRegistry, Depends(get_session_registry)]


# =============================================================================
# RESPONSE MODELS
# =============================================================================


class LocationResponse(BaseModel):
    latitude: float
    longitude: float


class CandidateResponse(BaseModel):
    """A candidate profile as shown to the viewer."""

    id: str
    name: str
    age: int
    distance: float
    gender: str | None = None
    interests: list[str] = Field(default_factory=list)
    verified: bool = False
    bio: str = ""
    image_url: str | None = None
    common_events: int = 0
    location: LocationResponse | None = None

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> "CandidateResponse":
        return cls(
            id=candidate.id,
            name=candidate.name,
            age=candidate.age_years,
            distance=candidate.distance_units,
            gender=candidate.gender_label,
            interests=list(candidate.interest_tags),
            verified=candidate.verified,
            bio=candidate.bio,
            image_url=candidate.image_url,
            common_events=candidate.common_events,
            location=(
                LocationResponse(
                    latitude=candidate.location.latitude,
                    longitude=candidate.location.longitude,
                )
                if candidate.location
                else None
            ),
        )


class SwipeViewResponse(BaseModel):
    """The sequential swipe view ("Showing profile N of M")."""

    current: CandidateResponse | None = None
    position: int | None = None
    remaining: int = 0
    total_filtered: int = 0
    exhausted: bool = True

    @classmethod
    def from_view(cls, view: SwipeView) -> "SwipeViewResponse":
        return cls(
            current=CandidateResponse.from_candidate(view.current) if view.current else None,
            position=view.position,
            remaining=view.remaining,
            total_filtered=view.total_filtered,
            exhausted=view.exhausted,
        )


class EventResponse(BaseModel):
    """An engine notification raised while handling the request."""

    type: str
    candidate_id: str | None = None
    outcome: Outcome | None = None


class DecisionResponse(BaseModel):
    candidate_id: str
    outcome: Outcome
    sequence: int

    @classmethod
    def from_record(cls, record: DecisionRecord) -> "DecisionResponse":
        return cls(
            candidate_id=record.candidate_id,
            outcome=record.outcome,
            sequence=record.decided_at_sequence,
        )


class RefreshResponse(BaseModel):
    candidates_loaded: int
    view: SwipeViewResponse
    events: list[EventResponse] = Field(default_factory=list)


class DecideRequest(BaseModel):
    """Request model for a swipe decision."""

    candidate_id: str = Field(..., description="Id of the candidate currently shown")
    outcome: str = Field(
        ...,
        description="One of: favor, pass, defer",
        examples=["favor"],
    )


class DecideResponse(BaseModel):
    decision: DecisionResponse
    matched: bool
    exhausted: bool
    view: SwipeViewResponse
    events: list[EventResponse] = Field(default_factory=list)


class UndoResponse(BaseModel):
    undone: DecisionResponse
    view: SwipeViewResponse
    events: list[EventResponse] = Field(default_factory=list)


class FiltersRequest(BaseModel):
    """Filter criteria. Omitted fields do not filter."""

    max_distance: float | None = Field(default=None, ge=0)
    gender_equals: str | None = None
    age_min: int | None = Field(default=None, ge=0)
    age_max: int | None = Field(default=None, ge=0)
    interest_contains: str | None = None
    verified_only: bool = False

    def to_criteria(self) -> FilterCriteria:
        return FilterCriteria(**self.model_dump())


class FiltersResponse(BaseModel):
    filters: FiltersRequest
    view: SwipeViewResponse
    events: list[EventResponse] = Field(default_factory=list)


class GridResponse(BaseModel):
    candidates: list[CandidateResponse] = Field(default_factory=list)
    total: int = 0


class MapPinResponse(BaseModel):
    candidate_id: str
    name: str
    latitude: float
    longitude: float


class MapResponse(BaseModel):
    pins: list[MapPinResponse] = Field(default_factory=list)
    without_location: int = 0
    show_viewer_location: bool = False


class StatsResponse(BaseModel):
    """Decision counts for the session."""

    counts: dict[Outcome, int] = Field(default_factory=dict)
    decided: int = 0
    remaining: int = 0
    can_undo: bool = False


class DeleteResponse(BaseModel):
    session_id: str
    deleted: bool


def _events(events: list[DiscoveryEvent]) -> list[EventResponse]:
    return [
        EventResponse(type=e.type.value, candidate_id=e.candidate_id, outcome=e.outcome)
        for e in events
    ]


# =============================================================================
# ENDPOINTS
# =============================================================================


@router.post("/{session_id}/refresh", response_model=ApiResponse[RefreshResponse])
async def refresh_candidates(session_id: str, registry: Registry) -> ApiResponse[RefreshResponse]:
    """
    Reload and reshuffle the session's candidates.

    Clears all decisions and the undo slot. Fails with load_failed when
    the profile source is unavailable; the previous profiles stay usable.
    """
    async with registry.claim(session_id) as session:
        loaded = await session.reshuffle()
        return create_success(
            RefreshResponse(
                candidates_loaded=loaded,
                view=SwipeViewResponse.from_view(session.swipe_view()),
                events=_events(registry.recorder(session_id).drain()),
            )
        )


@router.put("/{session_id}/filters", response_model=ApiResponse[FiltersResponse])
async def update_filters(
    session_id: str,
    request: FiltersRequest,
    registry: Registry,
) -> ApiResponse[FiltersResponse]:
    """
    Replace the filter criteria.

    Decisions already made are kept; only the undecided list is recomputed.
    """
    async with registry.claim(session_id) as session:
        session.apply_filters(request.to_criteria())
        return create_success(
            FiltersResponse(
                filters=request,
                view=SwipeViewResponse.from_view(session.swipe_view()),
                events=_events(registry.recorder(session_id).drain()),
            )
        )


@router.get("/{session_id}/current", response_model=ApiResponse[SwipeViewResponse])
async def get_current(session_id: str, registry: Registry) -> ApiResponse[SwipeViewResponse]:
    """Get the candidate currently presented in the swipe view."""
    async with registry.claim(session_id, create=False) as session:
        return create_success(SwipeViewResponse.from_view(session.swipe_view()))


@router.get("/{session_id}/grid", response_model=ApiResponse[GridResponse])
async def get_grid(session_id: str, registry: Registry) -> ApiResponse[GridResponse]:
    """Get every candidate matching the filters, decided or not."""
    async with registry.claim(session_id, create=False) as session:
        candidates = session.grid_view()
        return create_success(
            GridResponse(
                candidates=[CandidateResponse.from_candidate(c) for c in candidates],
                total=len(candidates),
            )
        )


@router.get("/{session_id}/map", response_model=ApiResponse[MapResponse])
async def get_map(
    session_id: str,
    registry: Registry,
    show_viewer_location: Annotated[bool, Query()] = False,
) -> ApiResponse[MapResponse]:
    """Get map pins for filter-matching candidates that have a location."""
    async with registry.claim(session_id, create=False) as session:
        view = session.map_view(show_viewer_location)
        return create_success(
            MapResponse(
                pins=[
                    MapPinResponse(
                        candidate_id=pin.candidate_id,
                        name=pin.name,
                        latitude=pin.location.latitude,
                        longitude=pin.location.longitude,
                    )
                    for pin in view.pins
                ],
                without_location=view.without_location,
                show_viewer_location=view.show_viewer_location,
            )
        )


@router.post("/{session_id}/decide", response_model=ApiResponse[DecideResponse])
async def decide(
    session_id: str,
    request: DecideRequest,
    registry: Registry,
) -> ApiResponse[DecideResponse]:
    """
    Favor, pass or defer the current candidate.

    Fails with invalid_candidate when candidate_id is not the one currently
    shown (stale client).
    """
    async with registry.claim(session_id, create=False) as session:
        result = session.decide(request.candidate_id, request.outcome)
        return create_success(
            DecideResponse(
                decision=DecisionResponse.from_record(result.record),
                matched=result.matched,
                exhausted=result.exhausted,
                view=SwipeViewResponse.from_view(session.swipe_view()),
                events=_events(registry.recorder(session_id).drain()),
            )
        )


@router.post("/{session_id}/undo", response_model=ApiResponse[UndoResponse])
async def undo(session_id: str, registry: Registry) -> ApiResponse[UndoResponse]:
    """
    Undo the most recent decision.

    Only one level of undo is kept. Fails with nothing_to_undo otherwise.
    """
    async with registry.claim(session_id, create=False) as session:
        record = session.undo()
        return create_success(
            UndoResponse(
                undone=DecisionResponse.from_record(record),
                view=SwipeViewResponse.from_view(session.swipe_view()),
                events=_events(registry.recorder(session_id).drain()),
            )
        )


@router.get("/{session_id}/stats", response_model=ApiResponse[StatsResponse])
async def get_stats(session_id: str, registry: Registry) -> ApiResponse[StatsResponse]:
    """Get decision counts for the session."""
    async with registry.claim(session_id, create=False) as session:
        return create_success(
            StatsResponse(
                counts=session.decision_counts(),
                decided=len(session.decided_ids),
                remaining=len(session.undecided()),
                can_undo=session.last_decision is not None,
            )
        )


@router.delete("/{session_id}", response_model=ApiResponse[DeleteResponse])
async def delete_session(session_id: str, registry: Registry) -> ApiResponse[DeleteResponse]:
    """End a session once any in-flight request for it has finished."""
    deleted = await registry.discard(session_id)
    return create_success(DeleteResponse(session_id=session_id, deleted=deleted))
