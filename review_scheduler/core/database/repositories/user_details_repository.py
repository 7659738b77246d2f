"""
User details repository for course selection and session progress
"""

import logging

from ..connection import DatabaseConnection
from ..models import UserDetails

logger = logging.getLogger(__name__)

PROGRESS_COLUMNS = {
    "new": "new_done",
    "due": "due_done",
    "review": "review_done",
}


class UserDetailsRepository:
    """Repository for per-user details"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def get(self, user_id: str, timeout: float | None = None) -> UserDetails | None:
        """Get details for a user"""
        with self.db_connection.get_connection(timeout) as conn:
            row = conn.execute(
                "SELECT * FROM user_details WHERE user_id = ?", (user_id,)
            ).fetchone()
            return UserDetails.from_row(row) if row else None

    def save(
        self,
        user_id: str,
        selected_course: str | None = None,
        is_casual: bool = False,
        daily_new_limit: int | None = None,
        timeout: float | None = None,
    ) -> UserDetails:
        """Create details for a user or update the course selection"""
        with self.db_connection.get_connection(timeout) as conn:
            conn.execute(
                """
                INSERT INTO user_details (user_id, selected_course, is_casual, daily_new_limit)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    selected_course = excluded.selected_course,
                    is_casual = excluded.is_casual,
                    daily_new_limit = excluded.daily_new_limit
                """,
                (user_id, selected_course, bool(is_casual), daily_new_limit),
            )
            conn.commit()
            row = conn.execute(
                "SELECT * FROM user_details WHERE user_id = ?", (user_id,)
            ).fetchone()

        logger.info(
            f"Saved details for user {user_id}: course={selected_course}, casual={is_casual}"
        )
        return UserDetails.from_row(row)

    def record_progress(
        self,
        user_id: str,
        category: str,
        session_day: int,
        timeout: float | None = None,
    ) -> bool:
        """Count one completed item of a category for the given session day

        Counters belonging to an earlier day are reset in the same statement.
        """
        if category not in PROGRESS_COLUMNS:
            raise ValueError(f"Unknown session category: {category}")

        target = PROGRESS_COLUMNS[category]
        assignments = ", ".join(
            f"{column} = CASE WHEN session_day = :day THEN {column} ELSE 0 END"
            + (" + 1" if column == target else "")
            for column in PROGRESS_COLUMNS.values()
        )

        with self.db_connection.get_connection(timeout) as conn:
            cursor = conn.execute(
                f"""
                UPDATE user_details
                SET {assignments}, session_day = :day
                WHERE user_id = :user_id
                """,  # noqa: S608  # Safe: assignments contains only column names
                {"day": session_day, "user_id": user_id},
            )
            conn.commit()
            updated = cursor.rowcount > 0

        if not updated:
            logger.debug(f"No details for user {user_id}, session progress not recorded")
        return updated
