"""
Database connection manager for the review scheduler
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from ...config import Settings, get_database_path, get_settings
from ...errors import SchedulerError, StoreTimeoutError

logger = logging.getLogger(__name__)

BUSY_MARKERS = ("database is locked", "database is busy", "database table is locked")


class DatabaseConnection:
    """Manages SQLite database connections and settings"""

    def __init__(self, db_path: str | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.db_path = db_path or get_database_path(self.settings)
        self.default_timeout = self.settings.store_timeout
        self._ensure_database_directory()
        self._init_connection_settings()

    def _ensure_database_directory(self) -> None:
        """Ensure the database directory exists"""
        db_dir = Path(self.db_path).parent
        db_dir.mkdir(parents=True, exist_ok=True)

    def _init_connection_settings(self) -> None:
        """Initialize database connection settings"""
        with self.get_connection() as conn:
            # WAL lets readers proceed while an evaluation is being written
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA foreign_keys=ON")

    @contextmanager
    def get_connection(self, timeout: float | None = None):
        """Get database connection with proper cleanup

        A lock held longer than ``timeout`` seconds surfaces as
        StoreTimeoutError after the open transaction is rolled back.
        """
        timeout = self.default_timeout if timeout is None else timeout
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=timeout)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.OperationalError as e:
            if conn:
                conn.rollback()
            if any(marker in str(e).lower() for marker in BUSY_MARKERS):
                logger.error(f"Store timed out after {timeout}s: {e}")
                raise StoreTimeoutError(
                    f"Store did not respond within {timeout}s"
                ) from e
            logger.error(f"Database error: {e}")
            raise
        except SchedulerError:
            if conn:
                conn.rollback()
            raise
        except Exception as e:
            if conn:
                conn.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            if conn:
                conn.close()

    def init_database(self) -> None:
        """Initialize database tables"""
        with self.get_connection() as conn:
            self._create_tables(conn)
            self._create_indexes(conn)
            conn.commit()

    def _create_tables(self, conn: sqlite3.Connection) -> None:
        """Create database tables"""
        tables = [
            """
            CREATE TABLE IF NOT EXISTS items (
                id TEXT PRIMARY KEY,
                flashcard_id TEXT NOT NULL,
                user_id TEXT NOT NULL,
                course_id TEXT,
                is_casual BOOLEAN NOT NULL DEFAULT 0,
                easiness_factor REAL NOT NULL DEFAULT 2.5,
                times_repeated INTEGER NOT NULL DEFAULT 0,
                actual_times_repeated INTEGER NOT NULL DEFAULT 0,
                last_repetition INTEGER NOT NULL DEFAULT 0,
                next_repetition INTEGER NOT NULL DEFAULT 0,
                previous_days_change INTEGER NOT NULL DEFAULT 0,
                extra_repeat_today BOOLEAN NOT NULL DEFAULT 0,
                version INTEGER NOT NULL DEFAULT 0,
                UNIQUE(user_id, flashcard_id)
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS user_details (
                user_id TEXT PRIMARY KEY,
                selected_course TEXT,
                is_casual BOOLEAN NOT NULL DEFAULT 0,
                daily_new_limit INTEGER,
                session_day INTEGER NOT NULL DEFAULT 0,
                new_done INTEGER NOT NULL DEFAULT 0,
                due_done INTEGER NOT NULL DEFAULT 0,
                review_done INTEGER NOT NULL DEFAULT 0
            )
            """,
        ]

        for table_sql in tables:
            conn.execute(table_sql)

    def _create_indexes(self, conn: sqlite3.Connection) -> None:
        """Create database indexes for performance"""
        indexes = [
            "CREATE INDEX IF NOT EXISTS idx_items_user_course ON items(user_id, course_id)",
            "CREATE INDEX IF NOT EXISTS idx_items_next_repetition ON items(next_repetition)",
        ]

        for index_sql in indexes:
            try:
                conn.execute(index_sql)
            except sqlite3.OperationalError as e:
                logger.warning(f"Failed to create index: {index_sql}, error: {e}")
