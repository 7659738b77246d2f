"""
Error types raised by the review scheduler
"""


class SchedulerError(Exception):
    """Base class for all scheduler failures"""


class NotFoundError(SchedulerError):
    """Referenced item or user does not exist"""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key} not found")


class InvalidEvaluationError(SchedulerError, ValueError):
    """Evaluation is outside the accepted quality range"""

    def __init__(self, evaluation, low: float, high: float):
        self.evaluation = evaluation
        self.low = low
        self.high = high
        super().__init__(
            f"Evaluation must be a number between {low} and {high}, got {evaluation!r}"
        )


class StoreTimeoutError(SchedulerError):
    """Underlying store did not answer within the timeout"""


class ConcurrentUpdateConflict(SchedulerError):
    """Optimistic concurrency check failed on write"""

    def __init__(self, item_id: str, expected_version: int):
        self.item_id = item_id
        self.expected_version = expected_version
        super().__init__(
            f"Item {item_id} changed since version {expected_version} was read"
        )
