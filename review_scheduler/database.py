"""
Database setup for the review scheduler
"""

from .config import Settings, get_database_path
from .core.database.database_manager import DatabaseManager


def init_db(db_path: str | None = None, settings: Settings | None = None) -> DatabaseManager:
    """Create a database manager and make sure its schema exists"""
    db_manager = DatabaseManager(db_path, settings)
    db_manager.init_database()
    return db_manager


__all__ = ['DatabaseManager', 'get_database_path', 'init_db']
