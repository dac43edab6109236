"""Recursion step descriptors - what a step function hands back to a runner."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, Literal, TypeAlias, TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class Continue:
    """Iterate again with new arguments.

    Attributes:
        args: Argument tuple for the next call of the step function
        then: Optional post-processing function applied to the eventual
            result during the body runner's replay phase. The tail runner
            ignores it.
    """

    args: tuple[Any, ...] = ()
    then: Callable[[Any], Any] | None = None
    kind: Literal["continue"] = field(default="continue", init=False)


@dataclass(frozen=True)
class Done(Generic[V]):
    """Stop iterating and produce value.

    Returned from a post-processing function during replay, a Done stops
    the replay early.
    """

    value: V
    kind: Literal["done"] = field(default="done", init=False)


Step: TypeAlias = Continue | Done[Any]


def bounce(*args: Any, then: Callable[[Any], Any] | None = None) -> Continue:
    """Keep bouncing: call the step function again with args."""
    return Continue(args=args, then=then)


def land(value: V) -> Done[V]:
    """Finish up and return value to the runner's caller."""
    return Done(value)


def is_done(value: Any) -> bool:
    return isinstance(value, Done)
