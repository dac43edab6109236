"""Error types raised by the kernel and the runners."""

from __future__ import annotations


class ByneedError(Exception):
    """Base class for all byneed errors."""


class ThunkCycleError(ByneedError):
    """Raised when a thunk is forced again while its producer is running."""


class StepError(ByneedError):
    """Error raised when a step function returns something that is not a Step.

    The raw value is preserved for debugging purposes.
    """

    def __init__(self, message: str, raw_value: object) -> None:
        self.raw_value = raw_value
        super().__init__(message)

    def __repr__(self) -> str:
        return f"StepError({super().__repr__()}, raw_value={self.raw_value!r})"


class StepLimitExceeded(ByneedError):
    """Raised when a runner exceeds its configured max_steps."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Runner exceeded max_steps={limit}")
