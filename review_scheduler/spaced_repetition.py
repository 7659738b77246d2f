"""
Spaced Repetition System implementation using SuperMemo 2 algorithm
"""

import logging
import math
from dataclasses import dataclass

from .config import Settings, get_settings
from .errors import InvalidEvaluationError

logger = logging.getLogger(__name__)


@dataclass
class ReviewResult:
    """Result of a spaced repetition review"""

    new_interval: int
    new_easiness_factor: float
    forgotten: bool
    extra_repeat_today: bool


class SpacedRepetitionSystem:
    """SuperMemo 2 spaced repetition algorithm implementation

    Evaluations are recall quality on a continuous 0-5 scale. Anything
    below ``forgotten_threshold`` (3 by default) counts as forgotten; the
    threshold value itself counts as remembered.
    """

    def __init__(self, settings: Settings | None = None):
        settings = settings or get_settings()
        self.default_easiness = settings.default_easiness_factor
        self.min_easiness = settings.min_easiness_factor
        self.min_evaluation = settings.min_evaluation
        self.max_evaluation = settings.max_evaluation
        self.forgotten_threshold = settings.forgotten_threshold
        self.extra_repeat_threshold = settings.extra_repeat_threshold
        self.first_interval = settings.first_interval_days
        self.second_interval = settings.second_interval_days
        self.forgotten_interval = settings.forgotten_interval_days

    def validate_evaluation(self, evaluation) -> float:
        """Return evaluation as float or raise InvalidEvaluationError"""
        if isinstance(evaluation, bool) or not isinstance(evaluation, (int, float)):
            raise InvalidEvaluationError(
                evaluation, self.min_evaluation, self.max_evaluation
            )
        if math.isnan(evaluation) or not (
            self.min_evaluation <= evaluation <= self.max_evaluation
        ):
            raise InvalidEvaluationError(
                evaluation, self.min_evaluation, self.max_evaluation
            )
        return float(evaluation)

    def calculate_review(
        self,
        evaluation: float,
        times_repeated: int,
        previous_days_change: int,
        easiness_factor: float,
    ) -> ReviewResult:
        """
        Calculate next review based on SuperMemo 2 algorithm

        Args:
            evaluation: Recall quality (0 = blackout, 5 = perfect recall)
            times_repeated: Remembered reviews in a row before this one
            previous_days_change: Current interval in days
            easiness_factor: Current easiness factor

        Returns:
            ReviewResult with new parameters
        """
        quality = self.validate_evaluation(evaluation)

        logger.debug(
            f"Calculating review: q={quality}, reps={times_repeated}, "
            f"interval={previous_days_change}, ef={easiness_factor}"
        )

        new_easiness = self.calculate_easiness(quality, easiness_factor)
        forgotten = quality < self.forgotten_threshold

        if forgotten:
            new_interval = self.forgotten_interval
        else:
            new_interval = self._calculate_new_interval(
                times_repeated, previous_days_change, new_easiness
            )

        return ReviewResult(
            new_interval=new_interval,
            new_easiness_factor=new_easiness,
            forgotten=forgotten,
            extra_repeat_today=quality < self.extra_repeat_threshold,
        )

    def calculate_easiness(self, quality: float, current_easiness: float) -> float:
        """SM-2 easiness update, floored at the minimum easiness"""
        distance = self.max_evaluation - quality
        new_easiness = current_easiness + (0.1 - distance * (0.08 + distance * 0.02))
        return max(self.min_easiness, new_easiness)

    def _calculate_new_interval(
        self,
        times_repeated: int,
        previous_days_change: int,
        easiness_factor: float,
    ) -> int:
        if times_repeated == 0:
            return self.first_interval
        if times_repeated == 1:
            return self.second_interval
        # Half rounds up
        return max(1, math.floor(previous_days_change * easiness_factor + 0.5))

