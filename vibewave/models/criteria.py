"""
Filter criteria for candidate discovery.

FilterCriteria is owned and mutated by the caller (the UI layer). The
engine never reads it live: it takes a CriteriaSnapshot at rebuild time so
edits made after a rebuild cannot change the queue behind its back.
"""

from dataclasses import dataclass, fields


@dataclass(frozen=True, slots=True)
class CriteriaSnapshot:
    """Immutable copy of FilterCriteria taken when the queue is rebuilt."""

    max_distance: float | None = None
    gender_equals: str | None = None
    age_min: int | None = None
    age_max: int | None = None
    interest_contains: str | None = None
    verified_only: bool = False

    def is_empty(self) -> bool:
        """True when no sub-filter is set (every candidate passes)."""
        return (
            self.max_distance is None
            and not self.gender_equals
            and self.age_min is None
            and self.age_max is None
            and not self.interest_contains
            and not self.verified_only
        )


@dataclass
class FilterCriteria:
    """
    Mutable filter value object supplied by the presentation layer.

    Unset fields (None, empty string, False) never exclude a candidate.
    Numeric bounds are inclusive.
    """

    max_distance: float | None = None
    gender_equals: str | None = None
    age_min: int | None = None
    age_max: int | None = None
    interest_contains: str | None = None
    verified_only: bool = False

    def snapshot(self) -> CriteriaSnapshot:
        """Take an immutable copy of the current values."""
        return CriteriaSnapshot(**{f.name: getattr(self, f.name) for f in fields(self)})

    def is_empty(self) -> bool:
        """True when no sub-filter is set."""
        return self.snapshot().is_empty()
