"""
Random selector implementation.

Simple stateless selector picking a uniform random pair.
"""

import random
from collections.abc import Sequence
from typing_extensions import override

from ..exceptions import ValidationError
from ..interfaces import Selector
from ..logging_config import get_logger
from ..models import RatedItem


class RandomSelector(Selector):
    """Uniform random pair selector."""

    def __init__(self, rng: random.Random | None = None):
        """Initialize random selector.

        Args:
            rng: Randomness source (defaults to a fresh unseeded Random)
        """
        self.rng = rng or random.Random()
        self.logger = get_logger("random_selector")

    @override
    def select_pair(self, items: Sequence[RatedItem]) -> tuple[int, int]:
        """Return two distinct random positions, without replacement."""
        if len(items) < 2:
            raise ValidationError(f"Need at least 2 items to select a pair, got {len(items)}")

        left, right = self.rng.sample(range(len(items)), 2)
        self.logger.debug(f"Selected random pair: {items[left].name!r} vs {items[right].name!r}")
        return left, right
