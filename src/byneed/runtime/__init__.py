"""Runtime layer - recursion runners and their configuration."""

from byneed.runtime.config import RunnerConfig
from byneed.runtime.trampoline import (
    arun_body,
    arun_tail,
    body_trampoline,
    run_body,
    run_tail,
    trampoline,
)

__all__ = [
    "RunnerConfig",
    "run_tail",
    "run_body",
    "arun_tail",
    "arun_body",
    "trampoline",
    "body_trampoline",
]
