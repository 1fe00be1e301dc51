"""
Simulated judge implementation.

Answers comparisons from latent scores with a noise parameter, for testing and
unattended runs.
"""

import random
from typing import Dict

from typing_extensions import override

from ..exceptions import JudgeError
from ..interfaces import Judge
from ..models import Outcome, RatedItem


class SimulatedJudge(Judge):
    """
    Simulated judge for testing purposes.

    Compares ground truth scores with added noise.
    """

    def __init__(
        self,
        ground_truth: Dict[str, float],
        noise: float = 0.0,
        tie_margin: float = 0.0,
        rng: random.Random | None = None,
    ):
        """
        Initialize simulated judge.

        Args:
            ground_truth: Dict mapping item name to its true score
            noise: Amount of noise to add (0-1, where 1 = full noise)
            tie_margin: Noisy score differences up to this size answer EQUAL
            rng: Randomness source for the noise
        """
        self.ground_truth = ground_truth
        self.noise = max(0.0, min(1.0, noise))  # Clamp to [0, 1]
        self.tie_margin = tie_margin
        self.rng = rng or random.Random()
        self.comparisons = 0

    def _add_noise(self, score: float) -> float:
        """Add Gaussian noise to score."""
        if self.noise == 0:
            return score

        # Scale noise by score magnitude
        noise_scale = abs(score) * self.noise
        return score + self.rng.gauss(0, noise_scale)

    def _noisy_score(self, item: RatedItem) -> float:
        if item.name not in self.ground_truth:
            raise JudgeError(f"No ground truth score for item {item.name!r}")
        return self._add_noise(self.ground_truth[item.name])

    @override
    def compare(self, left: RatedItem, right: RatedItem) -> Outcome:
        """Prefer the item with the higher noisy score."""
        left_score = self._noisy_score(left)
        right_score = self._noisy_score(right)
        self.comparisons += 1

        if abs(left_score - right_score) <= self.tie_margin:
            return Outcome.EQUAL
        return Outcome.LEFT if left_score > right_score else Outcome.RIGHT
