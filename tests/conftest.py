import random

import pytest

from vibewave.discovery.events import EventRecorder
from vibewave.discovery.session import DiscoverySession
from vibewave.filtering.criteria_filter import reset_filter_metrics
from vibewave.models.candidate import Candidate, Coordinate
from vibewave.services.candidate_source import StaticCandidateSource


@pytest.fixture(autouse=True)
def reset_metrics() -> None:
    """Reset filter metrics before each test."""
    reset_filter_metrics()


@pytest.fixture
def sample_candidates() -> list[Candidate]:
    """Five candidates in a fixed store order."""
    return [
        Candidate(
            id="jessie",
            name="Jessie",
            age_years=24,
            distance_units=1.0,
            gender_label="Woman",
            interest_tags=("Music", "Hiking", "Coffee"),
            verified=True,
            location=Coordinate(40.73, -73.98),
        ),
        Candidate(
            id="mike",
            name="Mike",
            age_years=28,
            distance_units=3.0,
            gender_label="Man",
            interest_tags=("Gaming", "Tech", "Food"),
            verified=False,
            location=Coordinate(40.74, -73.99),
        ),
        Candidate(
            id="sarah",
            name="Sarah",
            age_years=22,
            distance_units=0.5,
            gender_label="Woman",
            interest_tags=("Art", "Photography", "Museums"),
            verified=True,
        ),
        Candidate(
            id="david",
            name="David",
            age_years=30,
            distance_units=5.0,
            gender_label="Man",
            interest_tags=("Fitness", "Running", "Cooking"),
            verified=True,
            location=Coordinate(40.68, -73.94),
        ),
        Candidate(
            id="alex",
            name="Alex",
            age_years=33,
            distance_units=7.5,
            gender_label=None,
            interest_tags=("Music", "Climbing"),
            verified=False,
        ),
    ]


class OrderedRandom(random.Random):
    """Random source whose shuffle keeps the input order."""

    def shuffle(self, x) -> None:  # noqa: ARG002
        return None


@pytest.fixture
def ordered_rng() -> random.Random:
    return OrderedRandom(7)


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
async def session(
    sample_candidates: list[Candidate],
    recorder: EventRecorder,
    ordered_rng: random.Random,
) -> DiscoverySession:
    """A loaded session that keeps store order and never matches."""
    discovery = DiscoverySession(
        StaticCandidateSource(sample_candidates),
        listener=recorder,
        rng=ordered_rng,
        match_probability=0.0,
    )
    await discovery.reshuffle()
    recorder.drain()
    return discovery
