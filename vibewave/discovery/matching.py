"""
Mutual-match simulation for Favor decisions.

A match is a single Bernoulli trial drawn from an injected random source.
Seed the source (or force the probability to 0.0 / 1.0) for
deterministic tests.
"""

import random

from vibewave.config import DEFAULT_MATCH_PROBABILITY


class MatchPolicy:
    """
    Decides whether a Favor decision turns into a mutual match.

    Args:
        probability: Chance of a match per Favor decision, in [0, 1]
        rng: Random source; a fresh unseeded Random when omitted
    """

    def __init__(
        self,
        probability: float = DEFAULT_MATCH_PROBABILITY,
        rng: random.Random | None = None,
    ) -> None:
        if not 0.0 <= probability <= 1.0:
            raise ValueError(f"probability must be in [0, 1], got {probability}")
        self.probability = probability
        self.rng = rng or random.Random()

    def trial(self) -> bool:
        """Run one match trial. 1.0 always matches, 0.0 never does."""
        return self.rng.random() < self.probability
