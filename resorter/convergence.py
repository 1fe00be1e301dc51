"""
Convergence checks for the resort loop.

An item is settled once its deviation is at or below the threshold.
"""

from collections.abc import Sequence

from .models import RatedItem

DEFAULT_DEVIATION_THRESHOLD = 65.0


def unsettled_items(items: Sequence[RatedItem], threshold: float = DEFAULT_DEVIATION_THRESHOLD) -> list[RatedItem]:
    """Return the items whose deviation is strictly above the threshold."""
    return [item for item in items if item.deviation > threshold]


def needs_more_rounds(items: Sequence[RatedItem], threshold: float = DEFAULT_DEVIATION_THRESHOLD) -> bool:
    """True if another comparison is needed (any deviation strictly above threshold)."""
    return any(item.deviation > threshold for item in items)
