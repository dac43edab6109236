from .combinators import (
    EMPTY,
    Stream,
    cons,
    fold_left,
    fold_right,
    fold_right_until,
    from_iterable,
    iterate,
    repeat,
    unfold,
)
from .kernel import (
    UNEVALUATED,
    ByneedError,
    Continue,
    Done,
    Evidence,
    Step,
    StepError,
    StepLimitExceeded,
    Thunk,
    ThunkCycleError,
    Trace,
    bounce,
    defer,
    force,
    is_done,
    is_thunk,
    land,
    lazy,
)
from .runtime import (
    RunnerConfig,
    arun_body,
    arun_tail,
    body_trampoline,
    run_body,
    run_tail,
    trampoline,
)

__all__ = [
    # Deferred values
    "Thunk",
    "UNEVALUATED",
    "defer",
    "force",
    "is_thunk",
    "lazy",
    # Steps & runners
    "Step",
    "Continue",
    "Done",
    "bounce",
    "land",
    "is_done",
    "run_tail",
    "run_body",
    "arun_tail",
    "arun_body",
    "trampoline",
    "body_trampoline",
    "RunnerConfig",
    # Streams & folds
    "Stream",
    "EMPTY",
    "cons",
    "iterate",
    "unfold",
    "from_iterable",
    "repeat",
    "fold_left",
    "fold_right",
    "fold_right_until",
    # Errors
    "ByneedError",
    "ThunkCycleError",
    "StepError",
    "StepLimitExceeded",
    # Tracing
    "Evidence",
    "Trace",
]
