"""
Item repository for review item scheduling state
"""

import logging
import uuid
from dataclasses import replace

from ....errors import ConcurrentUpdateConflict, NotFoundError
from ..connection import DatabaseConnection
from ..models import ReviewItem

logger = logging.getLogger(__name__)

SCHEDULING_COLUMNS = (
    "easiness_factor",
    "times_repeated",
    "actual_times_repeated",
    "last_repetition",
    "next_repetition",
    "previous_days_change",
    "extra_repeat_today",
)


class ItemRepository:
    """SQLite-backed item store"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def create(
        self,
        flashcard_id: str,
        user_id: str,
        course_id: str | None = None,
        is_casual: bool = False,
        timeout: float | None = None,
    ) -> ReviewItem:
        """Create the item for (user, flashcard), or return the existing one"""
        with self.db_connection.get_connection(timeout) as conn:
            cursor = conn.execute(
                """
                INSERT OR IGNORE INTO items (id, flashcard_id, user_id, course_id, is_casual)
                VALUES (?, ?, ?, ?, ?)
                """,
                (uuid.uuid4().hex, flashcard_id, user_id, course_id, bool(is_casual)),
            )
            created = cursor.rowcount > 0
            conn.commit()

            row = conn.execute(
                "SELECT * FROM items WHERE user_id = ? AND flashcard_id = ?",
                (user_id, flashcard_id),
            ).fetchone()

        if created:
            logger.info(f"Created item for user {user_id}, flashcard {flashcard_id}")
        else:
            logger.debug(
                f"Item already exists for user {user_id}, flashcard {flashcard_id}"
            )
        return ReviewItem.from_row(row)

    def get(
        self, item_id: str, user_id: str, timeout: float | None = None
    ) -> ReviewItem | None:
        """Get an item by id, scoped to its owner"""
        with self.db_connection.get_connection(timeout) as conn:
            row = conn.execute(
                "SELECT * FROM items WHERE id = ? AND user_id = ?",
                (item_id, user_id),
            ).fetchone()
            return ReviewItem.from_row(row) if row else None

    def put(self, item: ReviewItem, timeout: float | None = None) -> ReviewItem:
        """Persist scheduling fields if nobody wrote the item since it was read

        Returns the item with its bumped version. Raises NotFoundError when
        the item is gone and ConcurrentUpdateConflict when its version moved.
        """
        assignments = ", ".join(f"{column} = ?" for column in SCHEDULING_COLUMNS)
        params = [getattr(item, column) for column in SCHEDULING_COLUMNS]

        with self.db_connection.get_connection(timeout) as conn:
            cursor = conn.execute(
                f"""
                UPDATE items
                SET {assignments}, version = version + 1
                WHERE id = ? AND user_id = ? AND version = ?
                """,  # noqa: S608  # Safe: assignments contains only column names
                (*params, item.id, item.user_id, item.version),
            )

            if cursor.rowcount == 0:
                exists = conn.execute(
                    "SELECT 1 FROM items WHERE id = ? AND user_id = ?",
                    (item.id, item.user_id),
                ).fetchone()
                if not exists:
                    raise NotFoundError("Item", item.id)
                logger.warning(
                    f"Version conflict writing item {item.id} at version {item.version}"
                )
                raise ConcurrentUpdateConflict(item.id, item.version)

            conn.commit()

        return replace(item, version=item.version + 1)

    def query(
        self,
        user_id: str,
        course_id: str | None = None,
        is_casual: bool | None = None,
        timeout: float | None = None,
    ) -> list[ReviewItem]:
        """Get a user's items, optionally filtered by course and casual flag"""
        conditions = ["user_id = ?"]
        params: list = [user_id]

        if course_id is not None:
            conditions.append("course_id = ?")
            params.append(course_id)

        if is_casual is not None:
            conditions.append("is_casual = ?")
            params.append(bool(is_casual))

        with self.db_connection.get_connection(timeout) as conn:
            cursor = conn.execute(
                f"""
                SELECT * FROM items
                WHERE {" AND ".join(conditions)}
                ORDER BY next_repetition ASC, id ASC
                """,  # noqa: S608  # Safe: conditions are fixed fragments
                params,
            )
            return [ReviewItem.from_row(row) for row in cursor.fetchall()]

    def delete(
        self,
        user_id: str,
        is_casual: bool | None = None,
        timeout: float | None = None,
    ) -> int:
        """Delete a user's items, optionally only casual or course ones"""
        with self.db_connection.get_connection(timeout) as conn:
            if is_casual is None:
                cursor = conn.execute("DELETE FROM items WHERE user_id = ?", (user_id,))
            else:
                cursor = conn.execute(
                    "DELETE FROM items WHERE user_id = ? AND is_casual = ?",
                    (user_id, bool(is_casual)),
                )
            conn.commit()
            deleted = cursor.rowcount

        logger.info(f"Deleted {deleted} items for user {user_id}")
        return deleted
