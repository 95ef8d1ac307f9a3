"""
Candidate filtering for discovery.

Deterministic, side-effect-free evaluation of filter criteria against
candidate profiles.
"""

from vibewave.filtering.criteria_filter import (
    FilterMetrics,
    filter_candidates,
    get_filter_metrics,
    matches,
    reset_filter_metrics,
)

__all__ = [
    "FilterMetrics",
    "filter_candidates",
    "get_filter_metrics",
    "matches",
    "reset_filter_metrics",
]
