"""
TrueSkill ranker implementation.

Uses the trueskill package for the pairwise update and a Glicko-style step
for deviation decay.
"""

import math
from typing import TYPE_CHECKING

from typing_extensions import override

if TYPE_CHECKING:
    from loguru import Logger

from trueskill import DRAW_PROBABILITY, TrueSkill  # type: ignore[import-untyped]

from ..exceptions import UpdateError
from ..interfaces import Ranker
from ..logging_config import get_logger
from ..models import DEFAULT_DEVIATION, DEFAULT_RATING, MatchResult, RatedItem, SkillEstimate

# Glicko-1 uncertainty growth per rating period and its ceiling
DEFAULT_DECAY_CONSTANT = 63.2
DEFAULT_MAX_DEVIATION = 350.0


class TrueSkillRanker(Ranker):
    """
    TrueSkill-based ranker for one-on-one comparisons.

    Item rating maps to mu and deviation maps to sigma. The environment is
    private to the ranker, so no global trueskill state is touched.
    """

    def __init__(
        self,
        mu: float = DEFAULT_RATING,
        sigma: float = DEFAULT_DEVIATION,
        beta: float | None = None,
        tau: float | None = None,
        allow_draws: bool = False,
        decay_constant: float = DEFAULT_DECAY_CONSTANT,
        max_deviation: float = DEFAULT_MAX_DEVIATION,
    ):
        """
        Initialize TrueSkill ranker.

        Args:
            mu: Initial mean rating
            sigma: Initial standard deviation
            beta: Performance spread (default: sigma / 2)
            tau: Dynamic factor added before each update (default: sigma / 100)
            allow_draws: Accept MatchResult.DRAW (uses the trueskill default draw probability)
            decay_constant: Deviation growth per decay step
            max_deviation: Ceiling for decayed deviations
        """
        self.mu: float = mu
        self.sigma: float = sigma
        self.beta: float = sigma / 2 if beta is None else beta
        self.tau: float = sigma / 100 if tau is None else tau
        self.allow_draws: bool = allow_draws
        self.decay_constant: float = decay_constant
        self.max_deviation: float = max_deviation

        self.env = TrueSkill(
            mu=self.mu,
            sigma=self.sigma,
            beta=self.beta,
            tau=self.tau,
            draw_probability=DRAW_PROBABILITY if allow_draws else 0.0,
        )

        self.logger: Logger = get_logger("trueskill_ranker")
        self.logger.info(
            f"TrueSkill ranker initialized: mu={self.mu}, sigma={self.sigma}, beta={self.beta}, tau={self.tau}, draws={allow_draws}"
        )

    def _check_item(self, item: RatedItem) -> None:
        """Reject ratings the update cannot work with."""
        if not math.isfinite(item.rating):
            raise UpdateError(f"Item {item.name!r} has a non-finite rating: {item.rating}")
        if not math.isfinite(item.deviation) or item.deviation < 0:
            raise UpdateError(f"Item {item.name!r} has an invalid deviation: {item.deviation}")

    def _check_estimate(self, item: RatedItem, estimate: SkillEstimate) -> None:
        """Reject invalid update output instead of clamping it."""
        if not math.isfinite(estimate.rating) or not math.isfinite(estimate.deviation) or estimate.deviation < 0:
            raise UpdateError(
                f"Rating update produced an invalid estimate for {item.name!r}: "
                f"rating={estimate.rating}, deviation={estimate.deviation}"
            )

    @override
    def rate(
        self, left: RatedItem, right: RatedItem, result: MatchResult
    ) -> tuple[SkillEstimate, SkillEstimate]:
        """
        Rate one comparison.

        Winner goes first into rate_1vs1; a draw keeps the given order.
        """
        self._check_item(left)
        self._check_item(right)
        if result is MatchResult.DRAW and not self.allow_draws:
            raise UpdateError(f"Draws are disabled, cannot rate {left.name!r} vs {right.name!r} as a draw")

        try:
            # A zero or vanishing deviation has no finite Gaussian precision
            left_rating = self.env.create_rating(mu=left.rating, sigma=left.deviation)
            right_rating = self.env.create_rating(mu=right.rating, sigma=right.deviation)
            if result is MatchResult.LOSS:
                new_right, new_left = self.env.rate_1vs1(right_rating, left_rating)
            else:
                new_left, new_right = self.env.rate_1vs1(
                    left_rating, right_rating, drawn=result is MatchResult.DRAW
                )
        except (FloatingPointError, OverflowError, ValueError, ZeroDivisionError) as e:
            raise UpdateError(f"Rating update failed for {left.name!r} vs {right.name!r}: {e}") from e

        left_estimate = SkillEstimate(rating=new_left.mu, deviation=new_left.sigma)
        right_estimate = SkillEstimate(rating=new_right.mu, deviation=new_right.sigma)
        self._check_estimate(left, left_estimate)
        self._check_estimate(right, right_estimate)

        self.logger.info(f"Score update: {left.name} vs {right.name} ({result.value})")
        self.logger.info(f"  {left.name}: {left.rating:.2f}->{left_estimate.rating:.2f} (σ: {left.deviation:.2f}->{left_estimate.deviation:.2f})")
        self.logger.info(f"  {right.name}: {right.rating:.2f}->{right_estimate.rating:.2f} (σ: {right.deviation:.2f}->{right_estimate.deviation:.2f})")
        return left_estimate, right_estimate

    @override
    def decay(self, item: RatedItem) -> SkillEstimate:
        """
        Grow the deviation by one period: sqrt(σ² + c²), capped at max_deviation.

        A deviation already above the cap is left as is. Rating is unchanged.
        """
        self._check_item(item)
        grown = math.sqrt(item.deviation ** 2 + self.decay_constant ** 2)
        deviation = max(item.deviation, min(grown, self.max_deviation))
        self.logger.debug(f"Decayed {item.name}: σ {item.deviation:.2f}->{deviation:.2f}")
        return SkillEstimate(rating=item.rating, deviation=deviation)

