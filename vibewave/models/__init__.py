from vibewave.models.candidate import Candidate, Coordinate
from vibewave.models.criteria import CriteriaSnapshot, FilterCriteria
from vibewave.models.decision import DecisionRecord, Outcome
from vibewave.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    CandidateNoLongerEligibleError,
    FailureDetail,
    FailureKind,
    InvalidCandidateError,
    InvalidOutcomeError,
    KnownError,
    LoadFailedError,
    NothingToUndoError,
    OutcomeType,
    RefreshInProgressError,
    SessionNotFoundError,
    create_success,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)

__all__ = [
    "ApiResponse",
    "Candidate",
    "CandidateNoLongerEligibleError",
    "Coordinate",
    "CriteriaSnapshot",
    "DecisionRecord",
    "FailureDetail",
    "FailureKind",
    "FilterCriteria",
    "InvalidCandidateError",
    "InvalidOutcomeError",
    "KnownError",
    "LoadFailedError",
    "NothingToUndoError",
    "Outcome",
    "OutcomeType",
    "RefreshInProgressError",
    "STANDARD_MESSAGES",
    "STANDARD_SUGGESTIONS",
    "SessionNotFoundError",
    "create_success",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
]
