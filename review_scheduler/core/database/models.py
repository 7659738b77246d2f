"""
Database models for the review scheduler
"""

import sqlite3
from dataclasses import dataclass, fields
from typing import TypedDict


@dataclass
class ReviewItem:
    """Scheduling state for one (user, flashcard) pair"""

    id: str
    flashcard_id: str
    user_id: str
    course_id: str | None = None
    is_casual: bool = False
    easiness_factor: float = 2.5
    times_repeated: int = 0
    actual_times_repeated: int = 0
    last_repetition: int = 0
    next_repetition: int = 0
    previous_days_change: int = 0
    extra_repeat_today: bool = False
    version: int = 0

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "ReviewItem":
        data = {f.name: row[f.name] for f in fields(cls)}
        data["is_casual"] = bool(data["is_casual"])
        data["extra_repeat_today"] = bool(data["extra_repeat_today"])
        return cls(**data)


@dataclass
class UserDetails:
    """Per-user course selection and today's session progress"""

    user_id: str
    selected_course: str | None = None
    is_casual: bool = False
    daily_new_limit: int | None = None
    session_day: int = 0
    new_done: int = 0
    due_done: int = 0
    review_done: int = 0

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "UserDetails":
        data = {f.name: row[f.name] for f in fields(cls)}
        data["is_casual"] = bool(data["is_casual"])
        return cls(**data)


class ReviewBucket(TypedDict):
    """Number of items whose next repetition falls on one UTC day"""
    ts: int
    count: int


class SessionCount(TypedDict):
    """Session progress counters"""
    new_total: int
    new_done: int
    due_total: int
    due_done: int
    review_total: int
    review_done: int


def empty_session_count() -> SessionCount:
    return SessionCount(
        new_total=0,
        new_done=0,
        due_total=0,
        due_done=0,
        review_total=0,
        review_done=0,
    )
