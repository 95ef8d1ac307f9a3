from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A latitude/longitude pair for map presentation."""

    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class Candidate:
    """
    A profile eligible for discovery.

    Candidates are created in bulk when the store is (re)populated and
    are never mutated afterwards; a refresh replaces them wholesale.

    Attributes:
        id: Unique identifier, stable within a session
        age_years: Age in whole years (>= 0)
        distance_units: Distance from the viewer (>= 0)
        gender_label: Free-text gender, optional
        interest_tags: Ordered interest tags
        verified: Whether the profile is verified
        location: Map coordinate, optional
        name: Display name
        bio: Display-only biography
        image_url: Display-only portrait URL
        common_events: Number of events shared with the viewer
    """

    id: str
    age_years: int
    distance_units: float
    gender_label: str | None = None
    interest_tags: tuple[str, ...] = ()
    verified: bool = False
    location: Coordinate | None = None
    name: str = ""
    bio: str = ""
    image_url: str | None = None
    common_events: int = 0

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Candidate id cannot be empty")
        if self.age_years < 0:
            raise ValueError(f"age_years must be >= 0, got {self.age_years}")
        if self.distance_units < 0:
            raise ValueError(f"distance_units must be >= 0, got {self.distance_units}")
        # Accept lists from callers but store an immutable tuple
        if not isinstance(self.interest_tags, tuple):
            object.__setattr__(self, "interest_tags", tuple(self.interest_tags))
