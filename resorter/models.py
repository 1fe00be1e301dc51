"""
Core dataclasses for the resorter.

Defines RatedItem, the comparison enums and the run result.
"""

from dataclasses import dataclass, field
from enum import Enum

from .exceptions import ValidationError

DEFAULT_RATING = 1500.0
DEFAULT_DEVIATION = 100.0
DEFAULT_BUCKET = 0


@dataclass
class RatedItem:
    """An item being ranked, with its current skill estimate."""

    name: str
    rating: float = DEFAULT_RATING
    deviation: float = DEFAULT_DEVIATION
    bucket: int = DEFAULT_BUCKET

    def __post_init__(self) -> None:
        """Validate item data."""
        if not self.name:
            raise ValidationError("name cannot be empty")

    def apply(self, estimate: "SkillEstimate") -> None:
        """Overwrite rating and deviation with a new estimate."""
        self.rating = estimate.rating
        self.deviation = estimate.deviation


@dataclass(frozen=True)
class SkillEstimate:
    """Rating and deviation pair produced by a ranker."""

    rating: float
    deviation: float


class Outcome(Enum):
    """Answer given by the oracle for a (left, right) pair."""

    LEFT = "left"
    EQUAL = "equal"
    RIGHT = "right"


class MatchResult(Enum):
    """Result of a comparison from the left item's point of view."""

    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"

    @classmethod
    def from_outcome(cls, outcome: Outcome, allow_draws: bool = False) -> "MatchResult":
        """
        Translate an oracle answer into a rating result.

        EQUAL counts as a win for the right item unless true draws are enabled.
        """
        if outcome is Outcome.LEFT:
            return cls.WIN
        if outcome is Outcome.EQUAL and allow_draws:
            return cls.DRAW
        return cls.LOSS


class ResortStatus(Enum):
    """How a resort run ended."""

    STABILIZED = "stabilized"
    INSUFFICIENT_DATA = "insufficient_data"


@dataclass
class ResortResult:
    """Summary of a finished resort run."""

    status: ResortStatus
    comparisons: int = 0
    items: list[RatedItem] = field(default_factory=list)
