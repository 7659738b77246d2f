"""
Database manager that owns the connection and its repositories
"""

import logging

from ...config import Settings, get_settings
from .connection import DatabaseConnection
from .repositories.item_repository import ItemRepository
from .repositories.user_details_repository import UserDetailsRepository

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Store handle passed explicitly to the scheduling components"""

    def __init__(self, db_path: str | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.db_connection = DatabaseConnection(db_path, self.settings)
        self.item_repo = ItemRepository(self.db_connection)
        self.user_details_repo = UserDetailsRepository(self.db_connection)

    def init_database(self) -> None:
        """Initialize database tables and indexes"""
        self.db_connection.init_database()
        logger.info(f"Database ready at {self.db_connection.db_path}")

