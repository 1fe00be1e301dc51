"""
Orchestrator for resort runs.

Coordinates storage, judge, ranker and selector components. One comparison is
selected, answered, rated and persisted before the next one is chosen.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loguru import Logger

from .bucketizer import DEFAULT_BUCKET_COUNT, assign_buckets
from .convergence import DEFAULT_DEVIATION_THRESHOLD, needs_more_rounds, unsettled_items
from .exceptions import ConfigurationError, ValidationError
from .group_selectors.uncertainty_selector import DEFAULT_RANDOM_PAIR_PROBABILITY
from .interfaces import Judge, Ranker, Selector, Storage
from .logging_config import get_logger
from .models import MatchResult, RatedItem, ResortResult, ResortStatus


@dataclass
class ResortConfig:
    """Configuration for a resort run."""

    deviation_threshold: float = DEFAULT_DEVIATION_THRESHOLD  # stop once no deviation is above this
    random_pair_probability: float = DEFAULT_RANDOM_PAIR_PROBABILITY
    bucket_count: int = DEFAULT_BUCKET_COUNT
    exact_buckets: bool = False  # exact quantiles instead of the running counter
    allow_draws: bool = False  # EQUAL is a real draw instead of a right win
    decay: bool = False  # grow every deviation once before sorting
    progress_every: int = 10  # print progress every N comparisons

    def __post_init__(self):
        """Validate configuration."""
        if self.deviation_threshold <= 0:
            raise ConfigurationError(f"deviation_threshold must be positive, got {self.deviation_threshold}")
        if not (0.0 <= self.random_pair_probability <= 1.0):
            raise ConfigurationError(
                f"random_pair_probability must be between 0 and 1, got {self.random_pair_probability}"
            )
        if self.bucket_count < 1:
            raise ConfigurationError(f"bucket_count must be positive, got {self.bucket_count}")
        if self.progress_every < 1:
            raise ConfigurationError(f"progress_every must be positive, got {self.progress_every}")


class RunState(Enum):
    """Resort loop state."""

    RUNNING = "running"
    STABILIZED = "stabilized"


class Orchestrator:
    """Main orchestrator for a resort run."""

    def __init__(
        self,
        storage: Storage,
        judge: Judge,
        ranker: Ranker,
        selector: Selector,
        config: ResortConfig,
        rng: random.Random | None = None,
    ):
        """Initialize orchestrator with all components."""
        self.storage: Storage = storage
        self.judge: Judge = judge
        self.ranker: Ranker = ranker
        self.selector: Selector = selector
        self.config: ResortConfig = config
        self.rng: random.Random = rng or random.Random()

        # Runtime state
        self.comparisons: int = 0
        self.state: RunState = RunState.STABILIZED

        # Setup logger
        self.logger: Logger = get_logger("orchestrator")

    def run(self) -> ResortResult:
        """Load, optionally decay, then compare pairs until every rating settles."""
        self.logger.info(f"Starting resort with config: {self.config}")
        print("Loading ratings from disk...")
        items = self.storage.load_items()

        if self.config.decay:
            print("Processing rating decay...")
            self._apply_decay(items)

        if len(items) < 2:
            self.logger.info(f"Cannot sort {len(items)} item(s), nothing to do")
            return ResortResult(status=ResortStatus.INSUFFICIENT_DATA, comparisons=0, items=items)

        # Input order must not bias which items get compared first
        self.rng.shuffle(items)

        self.state = self._evaluate_state(items)
        self.logger.info(
            f"Initial state {self.state.value}: {len(unsettled_items(items, self.config.deviation_threshold))}/{len(items)} items unsettled"
        )

        while self.state is RunState.RUNNING:
            self._run_round(items)
            self.state = self._evaluate_state(items)

        self.logger.info(f"Ratings stabilized after {self.comparisons} comparisons")
        return ResortResult(status=ResortStatus.STABILIZED, comparisons=self.comparisons, items=items)

    def _apply_decay(self, items: list[RatedItem]) -> None:
        """Grow every item's deviation by one decay step."""
        for item in items:
            item.apply(self.ranker.decay(item))
        self.logger.info(f"Applied rating decay to {len(items)} items")

    def _evaluate_state(self, items: list[RatedItem]) -> RunState:
        if needs_more_rounds(items, self.config.deviation_threshold):
            return RunState.RUNNING
        return RunState.STABILIZED

    def _run_round(self, items: list[RatedItem]) -> None:
        """
        Run exactly one comparison and persist it.

        Nothing is written if the oracle or the update fails, so the store
        keeps the state after the last completed comparison.
        """
        left_index, right_index = self.selector.select_pair(items)
        if left_index == right_index:
            raise ValidationError(f"Selector returned the same item twice: index {left_index}")
        left, right = items[left_index], items[right_index]

        outcome = self.judge.compare(left, right)
        result = MatchResult.from_outcome(outcome, allow_draws=self.config.allow_draws)

        left_estimate, right_estimate = self.ranker.rate(left, right, result)
        left.apply(left_estimate)
        right.apply(right_estimate)
        self.comparisons += 1
        self.logger.info(
            f"Completed comparison {self.comparisons}: {left.name!r} vs {right.name!r} -> {outcome.value}"
        )

        self._persist(items)

        if self.comparisons % self.config.progress_every == 0:
            self._print_progress(items)

    def _persist(self, items: list[RatedItem]) -> None:
        """Re-bucket and save the whole working set."""
        assign_buckets(items, self.config.bucket_count, exact=self.config.exact_buckets)
        self.storage.save_items(items)
        self.logger.debug(f"Saved {len(items)} items after {self.comparisons} comparisons")

    def _print_progress(self, items: list[RatedItem]) -> None:
        """Print progress."""
        unsettled = len(unsettled_items(items, self.config.deviation_threshold))
        self.logger.info(f"Progress: {self.comparisons} comparisons, {unsettled}/{len(items)} items unsettled")
        print(f"Progress: {self.comparisons} comparisons, {unsettled}/{len(items)} items still unsettled")
