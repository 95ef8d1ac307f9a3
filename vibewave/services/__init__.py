"""
VibeWave services.

Data access and session hosting for candidate discovery.
"""

from vibewave.services.candidate_source import (
    CandidatePayload,
    CandidateSource,
    DemoCandidateSource,
    HttpCandidateSource,
    StaticCandidateSource,
    get_candidate_source,
    parse_candidates,
)

__all__ = [
    "CandidatePayload",
    "CandidateSource",
    "DemoCandidateSource",
    "HttpCandidateSource",
    "StaticCandidateSource",
    "get_candidate_source",
    "parse_candidates",
]
