"""
Utility functions for the review scheduler
"""

import logging
import time
from datetime import datetime, timezone
from functools import wraps

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def now_timestamp() -> int:
    """Current Unix time in whole seconds"""
    return int(time.time())


def utc_day_start(ts: int) -> int:
    """Unix timestamp of UTC midnight for the day containing ts"""
    moment = datetime.fromtimestamp(ts, tz=timezone.utc)
    midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return int(midnight.timestamp())


def days_to_seconds(days: int) -> int:
    return days * SECONDS_PER_DAY


def retry_on_exception(
    max_retries: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: tuple[type[BaseException], ...] = (Exception,),
):
    """Decorator for retrying functions on the given exceptions

    max_retries counts attempts, so max_retries=2 means one retry.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            last_exception = None

            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    if attempt < max_retries - 1:
                        wait_time = delay * (backoff**attempt)
                        logger.warning(
                            f"Attempt {attempt + 1} failed: {e}. Retrying in {wait_time}s..."
                        )
                        if wait_time > 0:
                            time.sleep(wait_time)
                    else:
                        logger.error(
                            f"All {max_retries} attempts failed for {func.__name__}"
                        )

            raise last_exception

        return wrapper

    return decorator
