"""Resilience error classes."""

from typing import Optional


class TimeBudgetExceededError(Exception):
    """Time budget for a logical call has been exhausted.

    Attributes:
        budget_seconds: The original time budget.
        elapsed_seconds: Time elapsed before the budget was exceeded.
        operation: Name of the operation.
        attempts: Attempts started before giving up.
    """

    def __init__(
        self,
        message: str,
        budget_seconds: Optional[float] = None,
        elapsed_seconds: Optional[float] = None,
        operation: Optional[str] = None,
        attempts: int = 0,
    ):
        super().__init__(message)
        self.budget_seconds = budget_seconds
        self.elapsed_seconds = elapsed_seconds
        self.operation = operation
        self.attempts = attempts
