"""Deferred value cells - call-by-need on an eager interpreter.

A Thunk suspends a zero-argument producer. The first force runs the
producer and memoizes the result in the cell's own slot; every later
force, from any reference to the same cell, returns the memo.

    >>> t = defer(lambda: 6 * 7)
    >>> t.evaluated
    False
    >>> force(t)
    42
    >>> t.evaluated
    True
"""

from __future__ import annotations

import functools
import threading
import time
from collections.abc import Callable
from contextlib import ExitStack
from typing import Any, Generic, TypeVar

from byneed.kernel.errors import ThunkCycleError
from byneed.kernel.trace import Trace

T = TypeVar("T")
R = TypeVar("R")


class _Unevaluated:
    """An empty memo slot.

    Users should compare against the UNEVALUATED singleton instead of
    making instances of this directly.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "UNEVALUATED"


UNEVALUATED = _Unevaluated()


class Thunk(Generic[T]):
    """A suspended computation evaluated at most once.

    The memo slot never holds another Thunk: when the producer returns a
    cell, that cell is forced too and only the final value is stored.

    A failing producer leaves the cell unevaluated, so a later force runs
    the producer again.

    With threadsafe=True the first force is a critical section guarded by
    a lock owned by the cell; racing observers all receive the one
    memoized value.
    """

    __slots__ = ("_producer", "_value", "_forcing", "_lock")

    def __init__(self, producer: Callable[[], T], threadsafe: bool = False) -> None:
        if not callable(producer):
            raise TypeError(f"Thunk producer must be callable, got {type(producer).__name__}")
        self._producer: Callable[[], Any] | None = producer
        self._value: Any = UNEVALUATED
        self._forcing = False
        self._lock: threading.RLock | None = threading.RLock() if threadsafe else None

    @property
    def evaluated(self) -> bool:
        return self._value is not UNEVALUATED

    @property
    def threadsafe(self) -> bool:
        return self._lock is not None

    def force(self, trace: Trace | None = None) -> T:
        """Return the value of this cell, evaluating it on first use.

        Args:
            trace: Optional trace receiving force_* events

        Returns:
            The memoized, fully collapsed value

        Raises:
            ThunkCycleError: If the producer forces this same cell
            Exception: Anything the producer raises, unchanged
        """
        if self._value is not UNEVALUATED:
            if trace is not None:
                trace.record("force_cached", info={"thunk": id(self)})
            return self._value

        if self._lock is None:
            return self._evaluate(trace)

        with self._lock:
            # Another thread may have finished while we waited
            if self._value is not UNEVALUATED:
                if trace is not None:
                    trace.record("force_cached", info={"thunk": id(self)})
                return self._value
            return self._evaluate(trace)

    def _evaluate(self, trace: Trace | None) -> T:
        # Chained cells are collapsed in a loop, not by recursing into
        # force(), so chain length never grows the stack. Every link is
        # held (and, when threadsafe, locked) until the final value is
        # known, then memoized at once.
        chain: list[Thunk[Any]] = []
        begin_ids: list[int | None] = []
        start_time = time.perf_counter()

        with ExitStack() as held:
            try:
                link: Thunk[Any] = self
                while True:
                    if link is not self and link._lock is not None:
                        held.enter_context(link._lock)
                    if link._value is not UNEVALUATED:
                        result = link._value
                        break
                    if link._forcing:
                        raise ThunkCycleError(f"{link!r} was forced while its producer was running")

                    link._forcing = True
                    chain.append(link)
                    if trace is not None:
                        begin_ids.append(trace.record("force_begin", info={"thunk": id(link)}))
                        if begin_ids[-1] is not None and link is self:
                            trace.push(begin_ids[-1])

                    result = link._producer()  # type: ignore[misc]
                    if not isinstance(result, Thunk):
                        break
                    link = result
            except Exception as exc:
                if trace is not None:
                    trace.record(
                        "force_error",
                        info={"error": str(exc)},
                        parent_id=begin_ids[0] if begin_ids else None,
                    )
                raise
            finally:
                for forced in chain:
                    forced._forcing = False
                if begin_ids and begin_ids[0] is not None and trace is not None:
                    trace.pop()

            for forced in chain:
                forced._value = result
                # Release the closure so whatever it captured can be collected
                forced._producer = None

        if trace is not None:
            duration_ms = (time.perf_counter() - start_time) * 1000
            for event_id in reversed(begin_ids):
                trace.record("force_end", parent_id=event_id, duration_ms=duration_ms)
        return result

    def map(self, fn: Callable[[T], R]) -> Thunk[R]:
        """Return a new cell applying fn to this cell's value when forced."""
        return Thunk(lambda: fn(self.force()), threadsafe=self.threadsafe)

    def __repr__(self) -> str:
        if self._value is UNEVALUATED:
            return "Thunk(<unevaluated>)"
        return f"Thunk({self._value!r})"


def defer(producer: Callable[[], T], *, threadsafe: bool = False) -> Thunk[T]:
    """Wrap producer in a new cell. Nothing runs until the cell is forced."""
    return Thunk(producer, threadsafe=threadsafe)


def force(value: Thunk[T] | T, *, trace: Trace | None = None) -> T:
    """Resolve value: cells are evaluated (or read from their memo), anything else is returned unchanged."""
    if isinstance(value, Thunk):
        return value.force(trace)
    return value


def is_thunk(value: Any) -> bool:
    return isinstance(value, Thunk)


def lazy(fn: Callable[..., T]) -> Callable[..., Thunk[T]]:
    """Decorator turning every call of fn into a suspended call.

    Arguments are passed through as given; cells among them stay
    suspended until fn forces them, so an argument fn never uses is
    never evaluated.

        @lazy
        def choose(flag, then, otherwise):
            return force(then) if force(flag) else force(otherwise)

        choose(True, 1, defer(expensive))  # expensive never runs
    """

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Thunk[T]:
        return Thunk(lambda: fn(*args, **kwargs))

    return wrapper
