"""
Tests for the Filter Evaluator.

These tests verify:
- Each sub-filter (distance, gender, age, interest, verified)
- Unset criteria never exclude a candidate (passthrough)
- Case-insensitive string matching and inclusive numeric bounds
- Determinism and order preservation
"""

import pytest

from vibewave.filtering.criteria_filter import (
    filter_candidates,
    get_filter_metrics,
    matches,
)
from vibewave.models.candidate import Candidate
from vibewave.models.criteria import FilterCriteria


@pytest.fixture
def scenario_candidates() -> list[Candidate]:
    """A(age 20, verified), B(age 40, unverified)."""
    return [
        Candidate(id="A", age_years=20, distance_units=1.0, verified=True),
        Candidate(id="B", age_years=40, distance_units=2.0, verified=False),
    ]


class TestPassthrough:
    def test_empty_criteria_matches_everything(self, sample_candidates: list[Candidate]) -> None:
        """No filters set → every candidate passes."""
        criteria = FilterCriteria()
        assert all(matches(c, criteria) for c in sample_candidates)

    def test_empty_strings_do_not_filter(self, sample_candidates: list[Candidate]) -> None:
        """Empty gender and interest strings are treated as unset."""
        criteria = FilterCriteria(gender_equals="", interest_contains="  ")
        assert filter_candidates(sample_candidates, criteria) == sample_candidates


class TestDistanceFilter:
    def test_bound_is_inclusive(self, sample_candidates: list[Candidate]) -> None:
        """Candidates exactly at max_distance pass."""
        result = filter_candidates(sample_candidates, FilterCriteria(max_distance=3.0))
        assert [c.id for c in result] == ["jessie", "mike", "sarah"]


class TestGenderFilter:
    def test_case_insensitive_exact_match(self, sample_candidates: list[Candidate]) -> None:
        """gender_equals ignores case but requires an exact label."""
        result = filter_candidates(sample_candidates, FilterCriteria(gender_equals="woman"))
        assert [c.id for c in result] == ["jessie", "sarah"]

    def test_substring_is_not_enough(self) -> None:
        """'Man' does not match 'Woman'."""
        candidate = Candidate(id="w", age_years=30, distance_units=1, gender_label="Woman")
        assert not matches(candidate, FilterCriteria(gender_equals="man"))

    def test_missing_label_fails_active_filter(self, sample_candidates: list[Candidate]) -> None:
        """A candidate without a gender label fails an active gender filter."""
        alex = sample_candidates[-1]
        assert not matches(alex, FilterCriteria(gender_equals="Man"))


class TestAgeFilter:
    def test_bounds_are_inclusive(self, sample_candidates: list[Candidate]) -> None:
        """age_min and age_max both include the boundary value."""
        result = filter_candidates(sample_candidates, FilterCriteria(age_min=24, age_max=30))
        assert [c.id for c in result] == ["jessie", "mike", "david"]

    def test_age_min_scenario(self, scenario_candidates: list[Candidate]) -> None:
        """ageMin 25 → only B passes; A does not match."""
        criteria = FilterCriteria(age_min=25)
        assert [c.id for c in filter_candidates(scenario_candidates, criteria)] == ["B"]
        assert matches(scenario_candidates[0], criteria) is False


class TestInterestFilter:
    def test_any_tag_containing_substring(self, sample_candidates: list[Candidate]) -> None:
        """Substring match against any tag, case-insensitive."""
        result = filter_candidates(sample_candidates, FilterCriteria(interest_contains="MUS"))
        assert [c.id for c in result] == ["jessie", "sarah", "alex"]

    def test_no_tags_fails_active_filter(self) -> None:
        """A candidate without tags fails an active interest filter."""
        candidate = Candidate(id="x", age_years=30, distance_units=1)
        assert not matches(candidate, FilterCriteria(interest_contains="art"))


class TestVerifiedFilter:
    def test_verified_only_scenario(self, scenario_candidates: list[Candidate]) -> None:
        """verifiedOnly → only A passes."""
        result = filter_candidates(scenario_candidates, FilterCriteria(verified_only=True))
        assert [c.id for c in result] == ["A"]


class TestDeterminism:
    def test_same_inputs_same_result(self, sample_candidates: list[Candidate]) -> None:
        """Evaluating the same pair twice gives the same answer."""
        criteria = FilterCriteria(max_distance=4, interest_contains="o", verified_only=True)
        for candidate in sample_candidates:
            assert matches(candidate, criteria) == matches(candidate, criteria)

    def test_snapshot_and_live_criteria_agree(self, sample_candidates: list[Candidate]) -> None:
        """A snapshot filters exactly like the criteria it was taken from."""
        criteria = FilterCriteria(age_min=23, gender_equals="MAN")
        assert filter_candidates(sample_candidates, criteria) == filter_candidates(
            sample_candidates, criteria.snapshot()
        )

    def test_conjunction_of_independent_filters(self, sample_candidates: list[Candidate]) -> None:
        """Combined filters equal the intersection of the single filters."""
        single = [
            FilterCriteria(max_distance=5.0),
            FilterCriteria(verified_only=True),
            FilterCriteria(age_max=29),
        ]
        combined = FilterCriteria(max_distance=5.0, verified_only=True, age_max=29)

        expected = {c.id for c in sample_candidates}
        for criteria in single:
            expected &= {c.id for c in filter_candidates(sample_candidates, criteria)}

        assert {c.id for c in filter_candidates(sample_candidates, combined)} == expected

    def test_store_order_preserved(self, sample_candidates: list[Candidate]) -> None:
        """Output keeps input order, never re-sorted."""
        reversed_input = list(reversed(sample_candidates))
        result = filter_candidates(reversed_input, FilterCriteria(verified_only=True))
        assert [c.id for c in result] == ["david", "sarah", "jessie"]


class TestMetrics:
    def test_metrics_recorded_per_pass(self, sample_candidates: list[Candidate]) -> None:
        """Each pass records surviving counts per stage."""
        filter_candidates(sample_candidates, FilterCriteria(max_distance=3.0, verified_only=True))

        metrics = get_filter_metrics()
        assert len(metrics) == 1
        assert metrics[0].total_candidates == 5
        assert metrics[0].after_distance_filter == 3
        assert metrics[0].after_verified_filter == 2
        assert metrics[0].final_size == 2
