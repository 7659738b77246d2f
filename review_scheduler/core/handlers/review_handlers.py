"""
Review operations exposed to the API layer
"""

import logging

from ...config import Settings
from ...errors import NotFoundError
from ...spaced_repetition import SpacedRepetitionSystem
from ...utils import now_timestamp
from ..database.database_manager import DatabaseManager
from ..database.models import ReviewBucket, ReviewItem, SessionCount, UserDetails
from ..scheduler.evaluation_processor import EvaluationProcessor
from ..scheduler.review_selector import ReviewSelector
from ..session.session_counter import NEW, SessionCounter

logger = logging.getLogger(__name__)


class ReviewHandlers:
    """Entry points for review queries and mutations"""

    def __init__(self, db_manager: DatabaseManager, settings: Settings | None = None):
        self.settings = settings or db_manager.settings
        self.db_manager = db_manager
        self.items = db_manager.item_repo
        self.user_details = db_manager.user_details_repo
        self.srs_system = SpacedRepetitionSystem(self.settings)
        self.evaluation_processor = EvaluationProcessor(
            self.items, self.srs_system, self.settings
        )
        self.review_selector = ReviewSelector(self.items)
        self.session_counter = SessionCounter(
            self.items, self.user_details, self.settings
        )

    def process_evaluation(
        self,
        item_id: str,
        evaluation: float,
        user_id: str,
        now: int | None = None,
        timeout: float | None = None,
    ) -> ReviewItem:
        """Score a review and count it towards today's session"""
        now = now_timestamp() if now is None else now
        item = self.get_item(item_id, user_id, timeout=timeout)
        category = self.session_counter.classify(item, now)

        updated = self.evaluation_processor.process_evaluation(
            item_id, evaluation, user_id, now=now, timeout=timeout
        )

        if category:
            self.session_counter.record_review(
                user_id, category, now=now, timeout=timeout
            )
        return updated

    def get_item(
        self, item_id: str, user_id: str, timeout: float | None = None
    ) -> ReviewItem:
        item = self.items.get(item_id, user_id, timeout=timeout)
        if item is None:
            raise NotFoundError("Item", item_id)
        return item

    def get_reviews(
        self,
        user_id: str,
        is_casual: bool | None = None,
        timeout: float | None = None,
    ) -> list[ReviewBucket]:
        return self.review_selector.get_reviews(user_id, is_casual, timeout=timeout)

    def get_session_count(
        self,
        user_id: str,
        now: int | None = None,
        timeout: float | None = None,
    ) -> SessionCount:
        return self.session_counter.get_session_count(user_id, now=now, timeout=timeout)

    def select_course(
        self,
        user_id: str,
        course_id: str | None,
        is_casual: bool = False,
        timeout: float | None = None,
    ) -> UserDetails:
        """Set which course (or casual mode) the user's session draws from"""
        return self.user_details.save(user_id, course_id, is_casual, timeout=timeout)

    def create_items_for_lesson(
        self,
        user_id: str,
        course_id: str,
        flashcard_ids: list[str],
        timeout: float | None = None,
    ) -> list[ReviewItem]:
        """Create course items for the flashcards of a watched lesson"""
        items = [
            self.items.create(
                flashcard_id, user_id, course_id, is_casual=False, timeout=timeout
            )
            for flashcard_id in flashcard_ids
        ]
        logger.info(
            f"User {user_id} watched a lesson of {course_id}: {len(items)} items"
        )
        return items

    def start_casual_session(
        self,
        user_id: str,
        flashcard_ids: list[str],
        timeout: float | None = None,
    ) -> list[ReviewItem]:
        """Create casual items for flashcards studied outside lessons"""
        return [
            self.items.create(flashcard_id, user_id, is_casual=True, timeout=timeout)
            for flashcard_id in flashcard_ids
        ]

    def get_session_items(
        self,
        user_id: str,
        now: int | None = None,
        timeout: float | None = None,
    ) -> list[ReviewItem]:
        """Items to study now, same-day repeats first and new items last

        New items are limited to what is left of the daily cap.
        """
        now = now_timestamp() if now is None else now
        details = self.user_details.get(user_id, timeout=timeout)
        if details is None:
            return []

        repeats, scheduled, new_items = [], [], []
        for item in self.session_counter.session_items(details, timeout=timeout):
            category = self.session_counter.classify(item, now)
            if self.evaluation_processor.is_same_day_repeat(item, now):
                repeats.append(item)
            elif category == NEW:
                new_items.append(item)
            elif category:
                scheduled.append(item)

        new_done, _, _ = self.session_counter.done_today(details, now)
        remaining = max(self.session_counter.new_limit(details) - new_done, 0)
        return repeats + scheduled + new_items[:remaining]

    def reset_progress(
        self,
        user_id: str,
        is_casual: bool = False,
        timeout: float | None = None,
    ) -> int:
        """Remove the user's casual or course items"""
        return self.items.delete(user_id, is_casual=is_casual, timeout=timeout)
