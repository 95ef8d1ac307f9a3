import random
from collections.abc import Iterable, Iterator

from vibewave.models.candidate import Candidate


class CandidateStore:
    """
    Master, unfiltered set of candidates in presentation order.

    Contents are only ever replaced wholesale; individual candidates are
    never added, removed or mutated in place.
    """

    def __init__(self, candidates: Iterable[Candidate] = ()) -> None:
        self._candidates: tuple[Candidate, ...] = ()
        self._by_id: dict[str, Candidate] = {}
        self.replace(candidates)

    def replace(self, candidates: Iterable[Candidate]) -> None:
        """
        Replace the store contents, keeping the given order.

        Raises:
            ValueError: If two candidates share an id
        """
        ordered = tuple(candidates)
        by_id: dict[str, Candidate] = {}
        for candidate in ordered:
            if candidate.id in by_id:
                raise ValueError(f"Duplicate candidate id: {candidate.id}")
            by_id[candidate.id] = candidate

        self._candidates = ordered
        self._by_id = by_id

    def reshuffle(self, candidates: Iterable[Candidate], rng: random.Random) -> None:
        """Replace the store contents in a random order drawn from rng."""
        shuffled = list(candidates)
        rng.shuffle(shuffled)
        self.replace(shuffled)

    def get(self, candidate_id: str) -> Candidate | None:
        return self._by_id.get(candidate_id)

    def ids(self) -> list[str]:
        return [c.id for c in self._candidates]

    @property
    def candidates(self) -> tuple[Candidate, ...]:
        return self._candidates

    def __contains__(self, candidate_id: object) -> bool:
        return candidate_id in self._by_id

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self._candidates)

    def __len__(self) -> int:
        return len(self._candidates)
