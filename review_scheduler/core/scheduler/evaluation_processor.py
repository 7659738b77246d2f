"""
Applies a user's recall evaluation to a review item
"""

import logging
from dataclasses import replace

from ...config import Settings, get_settings
from ...errors import ConcurrentUpdateConflict, NotFoundError
from ...spaced_repetition import SpacedRepetitionSystem
from ...utils import days_to_seconds, now_timestamp, retry_on_exception, utc_day_start
from ..database.models import ReviewItem
from ..database.store import ItemStore

logger = logging.getLogger(__name__)


class EvaluationProcessor:
    """Computes and persists SM-2 scheduling updates for single items"""

    def __init__(
        self,
        item_store: ItemStore,
        srs_system: SpacedRepetitionSystem | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self.item_store = item_store
        self.srs_system = srs_system or SpacedRepetitionSystem(settings)
        self.timeout = settings.store_timeout
        self._evaluate_with_retry = retry_on_exception(
            max_retries=settings.conflict_retries + 1,
            delay=0,
            exceptions=(ConcurrentUpdateConflict,),
        )(self._evaluate_once)

    def process(self, item: ReviewItem, evaluation: float, now: int) -> ReviewItem:
        """Return the item as it should look after the review, without saving it

        A forgotten item restarts the 1 day, 6 days sequence. A same-day
        repeat of an item flagged ``extra_repeat_today`` leaves the schedule
        alone and only clears the flag once the recall is good enough.
        """
        if self.is_same_day_repeat(item, now):
            quality = self.srs_system.validate_evaluation(evaluation)
            return replace(
                item,
                actual_times_repeated=item.actual_times_repeated + 1,
                last_repetition=now,
                extra_repeat_today=quality < self.srs_system.extra_repeat_threshold,
            )

        result = self.srs_system.calculate_review(
            evaluation,
            item.times_repeated,
            item.previous_days_change,
            item.easiness_factor,
        )

        if result.forgotten:
            times_repeated, previous_days_change = 0, 0
        else:
            times_repeated = item.times_repeated + 1
            previous_days_change = result.new_interval

        return replace(
            item,
            actual_times_repeated=item.actual_times_repeated + 1,
            times_repeated=times_repeated,
            easiness_factor=result.new_easiness_factor,
            previous_days_change=previous_days_change,
            last_repetition=now,
            next_repetition=now + days_to_seconds(result.new_interval),
            extra_repeat_today=result.extra_repeat_today,
        )

    @staticmethod
    def is_same_day_repeat(item: ReviewItem, now: int) -> bool:
        return (
            item.extra_repeat_today
            and item.last_repetition > 0
            and utc_day_start(item.last_repetition) == utc_day_start(now)
        )

    def process_evaluation(
        self,
        item_id: str,
        evaluation: float,
        user_id: str,
        now: int | None = None,
        timeout: float | None = None,
    ) -> ReviewItem:
        """Apply an evaluation to a stored item and persist the result

        Raises InvalidEvaluationError before touching the store, NotFoundError
        for unknown items and ConcurrentUpdateConflict when the item keeps
        changing underneath us.
        """
        self.srs_system.validate_evaluation(evaluation)
        now = now_timestamp() if now is None else now
        timeout = self.timeout if timeout is None else timeout

        updated = self._evaluate_with_retry(item_id, evaluation, user_id, now, timeout)

        logger.info(
            f"Processed evaluation {evaluation} for item {item_id}: "
            f"interval={updated.previous_days_change}d, "
            f"ef={updated.easiness_factor:.2f}, next={updated.next_repetition}"
        )
        return updated

    def _evaluate_once(
        self,
        item_id: str,
        evaluation: float,
        user_id: str,
        now: int,
        timeout: float,
    ) -> ReviewItem:
        item = self.item_store.get(item_id, user_id, timeout=timeout)
        if item is None:
            raise NotFoundError("Item", item_id)
        return self.item_store.put(self.process(item, evaluation, now), timeout=timeout)
