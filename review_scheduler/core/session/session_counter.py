"""
Session progress counting for the review scheduler
"""

import logging

from ...config import Settings, get_settings
from ...utils import now_timestamp, utc_day_start
from ..database.models import ReviewItem, SessionCount, UserDetails, empty_session_count
from ..database.store import ItemStore, UserDetailsStore

logger = logging.getLogger(__name__)

NEW = "new"
DUE = "due"
REVIEW = "review"


class SessionCounter:
    """Counts new, due and review items for a user's daily session"""

    def __init__(
        self,
        item_store: ItemStore,
        user_details_store: UserDetailsStore,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self.item_store = item_store
        self.user_details_store = user_details_store
        self.daily_new_limit = settings.daily_new_limit
        self.review_interval_days = settings.review_interval_days

    def classify(self, item: ReviewItem, now: int) -> str | None:
        """Session category of a pending item, or None if nothing is owed today"""
        if item.actual_times_repeated == 0:
            return NEW
        if 0 < item.next_repetition <= now:
            if item.previous_days_change >= self.review_interval_days:
                return REVIEW
            return DUE
        return None

    def session_items(
        self,
        details: UserDetails,
        timeout: float | None = None,
    ) -> list[ReviewItem]:
        """Items in scope of the user's current session (casual or course)"""
        if details.is_casual:
            return self.item_store.query(
                details.user_id, is_casual=True, timeout=timeout
            )
        return self.item_store.query(
            details.user_id, course_id=details.selected_course, timeout=timeout
        )

    def new_limit(self, details: UserDetails) -> int:
        if details.daily_new_limit is None:
            return self.daily_new_limit
        return details.daily_new_limit

    def done_today(self, details: UserDetails, now: int) -> tuple[int, int, int]:
        """(new, due, review) done counters, zero if they belong to another day"""
        if details.session_day != utc_day_start(now):
            return 0, 0, 0
        return details.new_done, details.due_done, details.review_done

    def get_session_count(
        self,
        user_id: str,
        now: int | None = None,
        timeout: float | None = None,
    ) -> SessionCount:
        """Totals and done counts of today's session for a user

        A user without details gets all zeros.
        """
        now = now_timestamp() if now is None else now
        details = self.user_details_store.get(user_id, timeout=timeout)
        if details is None:
            logger.debug(f"No details for user {user_id}, returning empty session count")
            return empty_session_count()

        pending = {NEW: 0, DUE: 0, REVIEW: 0}
        for item in self.session_items(details, timeout=timeout):
            category = self.classify(item, now)
            if category:
                pending[category] += 1

        new_done, due_done, review_done = self.done_today(details, now)
        new_remaining = max(self.new_limit(details) - new_done, 0)

        return SessionCount(
            new_total=new_done + min(pending[NEW], new_remaining),
            new_done=new_done,
            due_total=due_done + pending[DUE],
            due_done=due_done,
            review_total=review_done + pending[REVIEW],
            review_done=review_done,
        )

    def record_review(
        self,
        user_id: str,
        category: str,
        now: int | None = None,
        timeout: float | None = None,
    ) -> bool:
        """Count one completed item of category towards today's session"""
        now = now_timestamp() if now is None else now
        return self.user_details_store.record_progress(
            user_id, category, utc_day_start(now), timeout=timeout
        )
