"""
Uncertainty selector implementation.

Spends most comparisons on the least certain items, with a random pair mixed
in now and then.
"""

import random
from collections.abc import Sequence

from typing_extensions import override

from ..exceptions import ConfigurationError, ValidationError
from ..interfaces import Selector
from ..logging_config import get_logger
from ..models import RatedItem
from .random_selector import RandomSelector

DEFAULT_RANDOM_PAIR_PROBABILITY = 0.25


class UncertaintySelector(Selector):
    """
    Mixture selector for active ranking.

    With probability ``1 - random_pair_probability`` the two items with the
    highest deviation are compared; otherwise a uniform random pair is chosen.
    The random branch keeps the same two uncertain items from being picked
    forever and re-checks items that already look settled.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        random_pair_probability: float = DEFAULT_RANDOM_PAIR_PROBABILITY,
    ):
        """
        Initialize uncertainty selector.

        Args:
            rng: Randomness source shared with the random branch
            random_pair_probability: Chance of picking a random pair instead of the top-deviation pair
        """
        if not (0.0 <= random_pair_probability <= 1.0):
            raise ConfigurationError(
                f"random_pair_probability must be between 0 and 1, got {random_pair_probability}"
            )
        self.rng = rng or random.Random()
        self.random_pair_probability = random_pair_probability
        self.random_selector = RandomSelector(self.rng)
        self.logger = get_logger("uncertainty_selector")

    def _most_uncertain_pair(self, items: Sequence[RatedItem]) -> tuple[int, int]:
        """Positions of the two items with the highest deviation."""
        by_deviation = sorted(range(len(items)), key=lambda i: items[i].deviation, reverse=True)
        left, right = by_deviation[0], by_deviation[1]
        self.logger.debug(
            f"Selected most uncertain pair: {items[left].name!r} (σ={items[left].deviation:.2f}) "
            f"vs {items[right].name!r} (σ={items[right].deviation:.2f})"
        )
        return left, right

    @override
    def select_pair(self, items: Sequence[RatedItem]) -> tuple[int, int]:
        """Return the top-deviation pair, or a random pair some of the time."""
        if len(items) < 2:
            raise ValidationError(f"Need at least 2 items to select a pair, got {len(items)}")

        if self.rng.random() < self.random_pair_probability:
            return self.random_selector.select_pair(items)
        return self._most_uncertain_pair(items)
