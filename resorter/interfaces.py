"""
Abstract base classes defining the interfaces for the resorter.

All interfaces are synchronous: one comparison is asked, rated and persisted
before the next one is selected.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from .models import (
    DEFAULT_BUCKET,
    DEFAULT_DEVIATION,
    DEFAULT_RATING,
    MatchResult,
    Outcome,
    RatedItem,
    SkillEstimate,
)


class Judge(ABC):
    """Interface for the oracle answering pairwise comparisons."""

    @abstractmethod
    def compare(self, left: RatedItem, right: RatedItem) -> Outcome:
        """
        Ask which of two items is better.

        May block for as long as the answer takes.

        Args:
            left: Item shown as candidate 1
            right: Item shown as candidate 2

        Returns:
            Outcome.LEFT, Outcome.EQUAL or Outcome.RIGHT

        Raises:
            OracleAbortedError: if the comparison was cancelled or malformed
        """
        pass


class Storage(ABC):
    """Interface for persisting rated items."""

    @abstractmethod
    def load_items(self) -> list[RatedItem]:
        """Load every stored item."""
        pass

    @abstractmethod
    def save_items(self, items: Sequence[RatedItem]) -> None:
        """Replace the stored items with a complete fresh copy."""
        pass

    @abstractmethod
    def append_item(
        self,
        name: str,
        rating: float = DEFAULT_RATING,
        deviation: float = DEFAULT_DEVIATION,
        bucket: int = DEFAULT_BUCKET,
    ) -> RatedItem:
        """Append a single new item to the store."""
        pass


class Ranker(ABC):
    """Interface for the two-player rating update and the decay step."""

    @abstractmethod
    def rate(
        self, left: RatedItem, right: RatedItem, result: MatchResult
    ) -> tuple[SkillEstimate, SkillEstimate]:
        """
        Compute new estimates for both items of a comparison.

        Does not mutate the items.

        Raises:
            UpdateError: if the inputs or the computed ratings are invalid
        """
        pass

    @abstractmethod
    def decay(self, item: RatedItem) -> SkillEstimate:
        """Return the item's estimate with its deviation grown by one period."""
        pass


class Selector(ABC):
    """Interface for choosing the next pair to compare."""

    @abstractmethod
    def select_pair(self, items: Sequence[RatedItem]) -> tuple[int, int]:
        """
        Select two distinct positions in the working set.

        Args:
            items: Current working set, at least two items

        Returns:
            (left_index, right_index), never the same index twice
        """
        pass
