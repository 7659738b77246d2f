"""
Storage interfaces consumed by the scheduling components
"""

from typing import Protocol

from .models import ReviewItem, UserDetails


class ItemStore(Protocol):
    """Capability interface for review item persistence"""

    def get(
        self, item_id: str, user_id: str, timeout: float | None = None
    ) -> ReviewItem | None: ...

    def put(self, item: ReviewItem, timeout: float | None = None) -> ReviewItem:
        """Write item if its stored version still equals item.version"""
        ...

    def query(
        self,
        user_id: str,
        course_id: str | None = None,
        is_casual: bool | None = None,
        timeout: float | None = None,
    ) -> list[ReviewItem]: ...


class UserDetailsStore(Protocol):
    """Capability interface for user details persistence"""

    def get(self, user_id: str, timeout: float | None = None) -> UserDetails | None: ...

    def record_progress(
        self,
        user_id: str,
        category: str,
        session_day: int,
        timeout: float | None = None,
    ) -> bool: ...
