"""Runner configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RunnerConfig(BaseModel):
    """Configuration shared by the tail and body runners.

    Attributes:
        max_steps: Upper bound on step-function calls. None (the default)
            means iterate until a Done is produced.
        trace_steps: Record one "iteration" event per step when a trace is
            supplied. run_begin/run_end are recorded regardless.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_steps: int | None = Field(default=None, gt=0)
    trace_steps: bool = True

    @classmethod
    def default(cls) -> RunnerConfig:
        return _DEFAULT


_DEFAULT = RunnerConfig()
