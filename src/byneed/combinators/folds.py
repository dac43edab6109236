"""Folds expressed as step functions, so arbitrarily long inputs never overflow the stack."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any, TypeVar

from byneed.kernel.step import Continue, Done, bounce, land
from byneed.kernel.trace import Trace
from byneed.runtime.config import RunnerConfig
from byneed.runtime.trampoline import run_body, run_tail

T = TypeVar("T")
A = TypeVar("A")


def fold_left(
    fn: Callable[[A, T], A],
    seed: A,
    items: Iterable[T],
    *,
    config: RunnerConfig | None = None,
    trace: Trace | None = None,
) -> A:
    """fn(...fn(fn(seed, x0), x1)..., xn), driven by run_tail."""
    it = iter(items)

    def step(acc: A) -> Continue | Done[A]:
        for item in it:
            return bounce(fn(acc, item))
        return land(acc)

    return run_tail(step, (seed,), config=config, trace=trace)


def fold_right(
    fn: Callable[[T, A], A],
    seed: A,
    items: Iterable[T],
    *,
    config: RunnerConfig | None = None,
    trace: Trace | None = None,
) -> A:
    """fn(x0, fn(x1, ...fn(xn, seed))), driven by run_body.

    Same result as the native recursive definition, at constant stack depth.
    """

    def step(it: Iterator[T]) -> Continue | Done[A]:
        for item in it:
            return bounce(it, then=_combine_with(fn, item))
        return land(seed)

    return run_body(step, (iter(items),), config=config, trace=trace)


def fold_right_until(
    fn: Callable[[T, A], A],
    seed: A,
    items: Iterable[T],
    stop: Callable[[A], bool],
    *,
    config: RunnerConfig | None = None,
    trace: Trace | None = None,
) -> A:
    """Right fold that stops combining as soon as stop(acc) holds.

    Combination runs from the last element back to the first; the first
    accumulator satisfying stop is returned and the elements before it
    are never combined.
    """

    def step(it: Iterator[T]) -> Continue | Done[A]:
        for item in it:
            return bounce(it, then=_combine_until(fn, item, stop))
        return land(seed)

    return run_body(step, (iter(items),), config=config, trace=trace)


def _combine_with(fn: Callable[[T, A], A], item: T) -> Callable[[A], A]:
    def combine(acc: A) -> A:
        return fn(item, acc)

    return combine


def _combine_until(fn: Callable[[T, A], A], item: T, stop: Callable[[A], bool]) -> Callable[[A], Any]:
    def combine(acc: A) -> Any:
        result = fn(item, acc)
        if stop(result):
            return land(result)
        return result

    return combine
