"""
Filter Evaluator: Deterministic Candidate Filtering.

This module decides whether a candidate passes the viewer's filter
criteria. It is the single source of filter logic: the swipe, grid and
map views all derive from its output.

INVARIANTS:
- Evaluation is pure (no side effects except metrics and logging)
- Same candidate + criteria → same result (deterministic)
- An unset criteria field never excludes a candidate (passthrough)
- String comparisons are case-insensitive; numeric bounds are inclusive
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from vibewave.models.candidate import Candidate
from vibewave.models.criteria import CriteriaSnapshot, FilterCriteria

logger = logging.getLogger(__name__)

Criteria = FilterCriteria | CriteriaSnapshot


@dataclass
class FilterMetrics:
    """Metrics recorded per filter pass."""

    total_candidates: int = 0
    after_distance_filter: int = 0
    after_gender_filter: int = 0
    after_age_filter: int = 0
    after_interest_filter: int = 0
    after_verified_filter: int = 0
    final_size: int = 0


# Module-level metrics accumulator
_metrics_history: list[FilterMetrics] = []


def get_filter_metrics() -> list[FilterMetrics]:
    """Get all recorded metrics."""
    return _metrics_history.copy()


def reset_filter_metrics() -> None:
    """Reset metrics history (for testing)."""
    _metrics_history.clear()


# =============================================================================
# SUB-PREDICATES
# =============================================================================


def _matches_distance(candidate: Candidate, criteria: Criteria) -> bool:
    if criteria.max_distance is None:
        return True
    return candidate.distance_units <= criteria.max_distance


def _matches_gender(candidate: Candidate, criteria: Criteria) -> bool:
    """
    Case-insensitive exact match on the gender label.

    Candidates without a label fail an active gender filter.
    """
    wanted = (criteria.gender_equals or "").strip().lower()
    if not wanted:
        return True
    if candidate.gender_label is None:
        return False
    return candidate.gender_label.strip().lower() == wanted


def _matches_age(candidate: Candidate, criteria: Criteria) -> bool:
    if criteria.age_min is not None and candidate.age_years < criteria.age_min:
        return False
    if criteria.age_max is not None and candidate.age_years > criteria.age_max:
        return False
    return True


def _matches_interest(candidate: Candidate, criteria: Criteria) -> bool:
    """Pass if ANY interest tag contains the substring (case-insensitive)."""
    needle = (criteria.interest_contains or "").strip().lower()
    if not needle:
        return True
    return any(needle in tag.lower() for tag in candidate.interest_tags)


def _matches_verified(candidate: Candidate, criteria: Criteria) -> bool:
    if not criteria.verified_only:
        return True
    return candidate.verified


# Order is authoritative for metrics only; the conjunction is order-independent
_SUB_PREDICATES: tuple[tuple[str, Callable[[Candidate, Criteria], bool]], ...] = (
    ("after_distance_filter", _matches_distance),
    ("after_gender_filter", _matches_gender),
    ("after_age_filter", _matches_age),
    ("after_interest_filter", _matches_interest),
    ("after_verified_filter", _matches_verified),
)


def matches(candidate: Candidate, criteria: Criteria) -> bool:
    """
    Check whether a candidate passes every active filter.

    Args:
        candidate: The candidate to evaluate
        criteria: Live criteria or a snapshot of them

    Returns:
        True if every sub-filter passes (unset sub-filters always pass)
    """
    return all(predicate(candidate, criteria) for _, predicate in _SUB_PREDICATES)


def filter_candidates(
    candidates: Iterable[Candidate],
    criteria: Criteria,
) -> list[Candidate]:
    """
    Filter candidates, preserving their input order.

    Applies the sub-filters in order:
    1. Distance
    2. Gender
    3. Age range
    4. Interest substring
    5. Verified flag

    The result is never re-sorted; relevance ranking is not part of
    discovery.

    Args:
        candidates: Candidates in store order
        criteria: Live criteria or a snapshot of them

    Returns:
        Candidates that pass all applicable filters, in input order
    """
    remaining = list(candidates)
    metrics = FilterMetrics(total_candidates=len(remaining))

    for metric_name, predicate in _SUB_PREDICATES:
        remaining = [c for c in remaining if predicate(c, criteria)]
        setattr(metrics, metric_name, len(remaining))

    metrics.final_size = len(remaining)
    _metrics_history.append(metrics)

    logger.debug(
        "candidate_filter_applied",
        extra={
            "total": metrics.total_candidates,
            "after_distance": metrics.after_distance_filter,
            "after_gender": metrics.after_gender_filter,
            "after_age": metrics.after_age_filter,
            "after_interest": metrics.after_interest_filter,
            "final": metrics.final_size,
        },
    )

    return remaining
