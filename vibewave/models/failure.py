"""
Failure Explanation Envelope: Unified Response Classification.

This module defines the response envelope that ALL API endpoints use to
communicate outcomes to the client, and the known-error taxonomy raised by
the discovery engine.

INVARIANT: No raw 500 errors may reach the client.

Response types:
- Success: Operation completed successfully
- KnownFailure: System knows why it failed (engine errors, load failures)
- UnknownFailure: System does not know why it failed

AUTHORITY BOUNDARY:
All user-visible responses MUST pass through `finalize_response()`.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, PrivateAttr


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Discovery engine failures
    INVALID_CANDIDATE = "invalid_candidate"
    NOTHING_TO_UNDO = "nothing_to_undo"
    CANDIDATE_NO_LONGER_ELIGIBLE = "candidate_no_longer_eligible"
    REFRESH_IN_PROGRESS = "refresh_in_progress"
    SESSION_NOT_FOUND = "session_not_found"

    # Data-access failures
    LOAD_FAILED = "load_failed"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel, Generic[T]):
    """
    Universal response envelope for all API endpoints.

    Every response is classified into one of three outcome types,
    ensuring no failure reaches the user unexplained.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    # Set by finalize_response; lives and dies with the response object
    _finalized: bool = PrivateAttr(default=False)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """
        Create a known failure response.

        Use when the system knows exactly why the operation failed.
        Example: decision against a stale candidate, nothing to undo.
        """
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


# =============================================================================
# KNOWN ERRORS
# =============================================================================


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class InvalidCandidateError(KnownError):
    """
    Raised when a decision targets a candidate that is not currently presented.

    Indicates the caller and the queue are out of sync. Deciding the same
    candidate twice without an undo also lands here.
    """

    def __init__(self, candidate_id: str, current_id: str | None):
        self.candidate_id = candidate_id
        self.current_id = current_id
        super().__init__(
            kind=FailureKind.INVALID_CANDIDATE,
            message=f"Candidate '{candidate_id}' is not the current candidate.",
            detail=f"current={current_id}",
            suggestion="Reload the current candidate and try again.",
            status_code=409,
        )


class InvalidOutcomeError(KnownError):
    """Raised when a decision outcome is not one of favor, pass or defer."""

    def __init__(self, outcome: object):
        self.outcome = outcome
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=f"Unknown decision outcome: {outcome!r}",
            suggestion="Use one of: favor, pass, defer.",
            status_code=400,
        )


class NothingToUndoError(KnownError):
    """Raised when undo is requested but no decision is retained."""

    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.NOTHING_TO_UNDO,
            message="There is no decision to undo.",
            detail="Only the most recent decision can be undone, and only once.",
            status_code=409,
        )


class CandidateNoLongerEligibleError(KnownError):
    """
    Raised after an undo whose candidate no longer passes the current filters.

    The undo itself IS committed: the decision is removed from the session.
    The candidate simply cannot be shown again until the filters admit it.
    """

    def __init__(self, candidate_id: str):
        self.candidate_id = candidate_id
        super().__init__(
            kind=FailureKind.CANDIDATE_NO_LONGER_ELIGIBLE,
            message=f"Candidate '{candidate_id}' no longer matches your filters.",
            suggestion="Relax your filters to see this profile again.",
            status_code=409,
        )


class SessionNotFoundError(KnownError):
    """Raised when a request names a session that was never started or was ended."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(
            kind=FailureKind.SESSION_NOT_FOUND,
            message=f"Discovery session '{session_id}' does not exist.",
            suggestion="Refresh to start a discovery session.",
            status_code=404,
        )


class RefreshInProgressError(KnownError):
    """Raised when a decision or undo is attempted while profiles are reloading."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            kind=FailureKind.REFRESH_IN_PROGRESS,
            message="Profiles are being refreshed.",
            detail=f"Rejected operation: {operation}",
            suggestion="Wait for the refresh to finish and try again.",
            status_code=409,
        )


class LoadFailedError(KnownError):
    """
    Raised when the candidate data source fails.

    The engine does not retry. Retry policy belongs to the caller.
    """

    def __init__(self, source: str, detail: str | None = None):
        self.source = source
        super().__init__(
            kind=FailureKind.LOAD_FAILED,
            message="Unable to load profiles right now.",
            detail=f"{source}: {detail}" if detail else source,
            suggestion="Try refreshing again in a moment.",
            status_code=503,
        )


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================
#
# All user-visible responses MUST pass through this boundary.
#
# =============================================================================


# Standard messages (fixed text)

STANDARD_MESSAGES: dict[OutcomeType, str] = {
    OutcomeType.UNKNOWN_FAILURE: (
        "I failed and I don't know why. Try simplifying the request or retrying."
    ),
}

STANDARD_SUGGESTIONS: dict[OutcomeType, str] = {
    OutcomeType.UNKNOWN_FAILURE: "If this persists, please report the issue.",
}


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the authority boundary.

    Every response that passes through this function is guaranteed to:
    1. Have a valid outcome classification
    2. Have failure details if and only if it is not successful

    Raises:
        ValueError: If response structure is invalid
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    else:
        if response.failure is None:
            raise ValueError(f"{response.outcome.value} response must have failure details")

    response._finalized = True

    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    """Check if a response has passed through the authority boundary."""
    return response._finalized


def create_unknown_failure(
    exception: Exception,
    include_type: bool = True,
) -> ApiResponse[Any]:
    """
    Create an unknown failure response from an exception.

    The message is fixed and cannot be customized.
    """
    detail = None
    if include_type:
        detail = f"{type(exception).__name__}"

    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            message=STANDARD_MESSAGES[OutcomeType.UNKNOWN_FAILURE],
            detail=detail,
            suggestion=STANDARD_SUGGESTIONS[OutcomeType.UNKNOWN_FAILURE],
        ),
    )

    return finalize_response(response)


def create_success(data: T) -> ApiResponse[T]:
    """Create a finalized success response."""
    response = ApiResponse[T](outcome=OutcomeType.SUCCESS, data=data)
    return finalize_response(response)
