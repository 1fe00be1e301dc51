"""
Selector implementations.

Provides implementations of the Selector interface for choosing which pair
of items to compare next.

Available implementations:
- RandomSelector: Uniform random pair
- UncertaintySelector: Highest-deviation pair, mixed with random pairs
"""

from .random_selector import RandomSelector
from .uncertainty_selector import UncertaintySelector

__all__ = ["RandomSelector", "UncertaintySelector"]
