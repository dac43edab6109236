"""Kernel layer - pure abstractions for byneed."""

from byneed.kernel.errors import ByneedError, StepError, StepLimitExceeded, ThunkCycleError
from byneed.kernel.step import Continue, Done, Step, bounce, is_done, land
from byneed.kernel.thunk import UNEVALUATED, Thunk, defer, force, is_thunk, lazy
from byneed.kernel.trace import Evidence, Trace

__all__ = [
    # Deferred values
    "Thunk",
    "UNEVALUATED",
    "defer",
    "force",
    "is_thunk",
    "lazy",
    # Steps
    "Step",
    "Continue",
    "Done",
    "bounce",
    "land",
    "is_done",
    # Errors
    "ByneedError",
    "ThunkCycleError",
    "StepError",
    "StepLimitExceeded",
    # Tracing
    "Evidence",
    "Trace",
]
