"""
Groups upcoming repetitions by UTC calendar day
"""

import logging
from collections import Counter

from ...utils import utc_day_start
from ..database.models import ReviewBucket
from ..database.store import ItemStore

logger = logging.getLogger(__name__)


class ReviewSelector:
    """Answers "how many reviews fall on which day" for a user"""

    def __init__(self, item_store: ItemStore):
        self.item_store = item_store

    def get_reviews(
        self,
        user_id: str,
        is_casual: bool | None = None,
        timeout: float | None = None,
    ) -> list[ReviewBucket]:
        """Count a user's items per UTC day of their next repetition

        Items never scheduled (next_repetition == 0) land in the ts == 0
        bucket. Buckets are sorted by day.
        """
        items = self.item_store.query(user_id, is_casual=is_casual, timeout=timeout)
        counts = Counter(utc_day_start(item.next_repetition) for item in items)

        logger.debug(f"Found {len(counts)} review days for user {user_id}")
        return [ReviewBucket(ts=ts, count=count) for ts, count in sorted(counts.items())]
