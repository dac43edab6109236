"""Recursion runners - drive step functions without growing the call stack.

A step function receives the current arguments and returns either
Continue (call me again with these arguments) or Done (here is the
result). The runners loop; they never recurse.

    def factorial(acc, n):
        if n == 0:
            return land(acc)
        return bounce(acc * n, n - 1)

    run_tail(factorial, (1, 5))  # 120

run_body additionally collects the `then` function carried by each
Continue and replays them newest-first once Done is reached, which is
how body recursion of the shape `f(x) = op(x, f(next))` is expressed:

    def fold_sub(i):
        if i == len(xs):
            return land(0)
        return bounce(i + 1, then=lambda r, x=xs[i]: x - r)

Recursion in more than one position per step (naive Fibonacci) has no
such shape; rewrite it with an explicit worklist.
"""

from __future__ import annotations

import functools
import inspect
import time
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, NoReturn

from byneed.kernel.errors import StepError, StepLimitExceeded
from byneed.kernel.step import Continue, Done, Step
from byneed.kernel.trace import Trace
from byneed.runtime.config import RunnerConfig

StepFn = Callable[..., Step]
AsyncStepFn = Callable[..., "Step | Awaitable[Step]"]


def _reject(result: object) -> NoReturn:
    raise StepError(
        f"Step function must return Continue or Done, got {type(result).__name__}",
        raw_value=result,
    )


class _RunTracker:
    """Per-invocation bookkeeping: step counting, max_steps and trace events."""

    def __init__(self, mode: str, config: RunnerConfig | None, trace: Trace | None) -> None:
        config = config or RunnerConfig.default()
        self.steps = 0
        self._limit = config.max_steps
        self._trace = trace
        self._trace_steps = config.trace_steps
        self._event_id: int | None = None
        self._closed = False
        self._start = time.perf_counter()

        if trace is not None:
            self._event_id = trace.record("run_begin", info={"mode": mode})
            if self._event_id is not None:
                trace.push(self._event_id)

    def tick(self) -> None:
        if self._limit is not None and self.steps >= self._limit:
            raise StepLimitExceeded(self._limit)
        if self._trace is not None and self._trace_steps:
            self._trace.record("iteration", info={"index": self.steps})
        self.steps += 1

    def replay(self, pending: int) -> None:
        if self._trace is not None:
            self._trace.record("replay_begin", info={"pending": pending})

    def short_circuit(self, remaining: int) -> None:
        if self._trace is not None:
            self._trace.record("short_circuit", info={"remaining": remaining})

    def finish(self, value: Any) -> Any:
        if self._trace is not None:
            self._close()
            self._trace.record(
                "run_end",
                info={"steps": self.steps},
                parent_id=self._event_id,
                duration_ms=(time.perf_counter() - self._start) * 1000,
            )
        return value

    def fail(self, exc: Exception) -> None:
        if self._trace is not None:
            self._close()
            self._trace.record(
                "run_error",
                info={"error": str(exc), "steps": self.steps},
                parent_id=self._event_id,
            )

    def _close(self) -> None:
        if self._event_id is not None and self._trace is not None and not self._closed:
            self._trace.pop()
            self._closed = True


def _check_replay_result(value: Any) -> Any:
    if isinstance(value, Continue):
        raise StepError("Continue is not allowed during replay", raw_value=value)
    return value


def run_tail(
    step: StepFn,
    initial_args: Iterable[Any] = (),
    *,
    config: RunnerConfig | None = None,
    trace: Trace | None = None,
) -> Any:
    """Run a tail-recursive step function to completion.

    Args:
        step: Called as step(*args); returns Continue or Done
        initial_args: Arguments for the first call
        config: Optional runner configuration (max_steps, tracing)
        trace: Optional trace receiving run_* events

    Returns:
        The value of the first Done produced

    Raises:
        StepError: If step returns anything other than Continue or Done
        StepLimitExceeded: If config.max_steps is set and reached
    """
    run = _RunTracker("tail", config, trace)
    args = tuple(initial_args)
    try:
        while True:
            run.tick()
            result = step(*args)
            if isinstance(result, Continue):
                args = result.args
            elif isinstance(result, Done):
                return run.finish(result.value)
            else:
                _reject(result)
    except Exception as exc:
        run.fail(exc)
        raise


def run_body(
    step: StepFn,
    initial_args: Iterable[Any] = (),
    *,
    config: RunnerConfig | None = None,
    trace: Trace | None = None,
) -> Any:
    """Run a body-recursive step function to completion.

    Forward phase: iterate like run_tail, pushing each Continue.then onto
    a pending list. Replay phase: once Done(value) arrives, pop the
    pending functions newest-first, threading value through them. A
    replayed function returning Done stops the replay and its value is
    the result; the functions still pending are never called.

    Stack depth is constant; memory grows with the number of pending
    functions.

    Raises:
        StepError: If step returns anything other than Continue or Done,
            or a replayed function returns Continue
        StepLimitExceeded: If config.max_steps is set and reached
    """
    run = _RunTracker("body", config, trace)
    args = tuple(initial_args)
    pending: list[Callable[[Any], Any]] = []
    try:
        while True:
            run.tick()
            result = step(*args)
            if isinstance(result, Continue):
                if result.then is not None:
                    pending.append(result.then)
                args = result.args
            elif isinstance(result, Done):
                value = result.value
                break
            else:
                _reject(result)

        run.replay(len(pending))
        while pending:
            fn = pending.pop()
            value = _check_replay_result(fn(value))
            if isinstance(value, Done):
                run.short_circuit(len(pending))
                return run.finish(value.value)
        return run.finish(value)
    except Exception as exc:
        run.fail(exc)
        raise


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def arun_tail(
    step: AsyncStepFn,
    initial_args: Iterable[Any] = (),
    *,
    config: RunnerConfig | None = None,
    trace: Trace | None = None,
) -> Any:
    """Async run_tail: step may return a Step or an awaitable of one."""
    run = _RunTracker("tail", config, trace)
    args = tuple(initial_args)
    try:
        while True:
            run.tick()
            result = await _resolve(step(*args))
            if isinstance(result, Continue):
                args = result.args
            elif isinstance(result, Done):
                return run.finish(result.value)
            else:
                _reject(result)
    except Exception as exc:
        run.fail(exc)
        raise


async def arun_body(
    step: AsyncStepFn,
    initial_args: Iterable[Any] = (),
    *,
    config: RunnerConfig | None = None,
    trace: Trace | None = None,
) -> Any:
    """Async run_body: step and the `then` functions may be coroutines."""
    run = _RunTracker("body", config, trace)
    args = tuple(initial_args)
    pending: list[Callable[[Any], Any]] = []
    try:
        while True:
            run.tick()
            result = await _resolve(step(*args))
            if isinstance(result, Continue):
                if result.then is not None:
                    pending.append(result.then)
                args = result.args
            elif isinstance(result, Done):
                value = result.value
                break
            else:
                _reject(result)

        run.replay(len(pending))
        while pending:
            fn = pending.pop()
            value = _check_replay_result(await _resolve(fn(value)))
            if isinstance(value, Done):
                run.short_circuit(len(pending))
                return run.finish(value.value)
        return run.finish(value)
    except Exception as exc:
        run.fail(exc)
        raise


def trampoline(step: StepFn) -> Callable[..., Any]:
    """Decorator: calling the result with initial arguments runs step through run_tail."""

    @functools.wraps(step)
    def wrapper(*args: Any) -> Any:
        return run_tail(step, args)

    return wrapper


def body_trampoline(step: StepFn) -> Callable[..., Any]:
    """Decorator: calling the result with initial arguments runs step through run_body."""

    @functools.wraps(step)
    def wrapper(*args: Any) -> Any:
        return run_body(step, args)

    return wrapper
