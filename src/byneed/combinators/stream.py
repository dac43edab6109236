"""Lazy streams - corecursive, memoized, possibly infinite.

A Stream node holds a head and a suspended tail. Forcing a tail builds
exactly one more node and memoizes it, so every observer of a stream
shares the same nodes and each producer runs once.

    >>> naturals = iterate(lambda n: n + 1, 0)
    >>> naturals.map(lambda n: n * n).take(5).to_list()
    [0, 1, 4, 9, 16]
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any, Generic, TypeVar

from byneed.kernel.thunk import Thunk, defer, force

T = TypeVar("T")
U = TypeVar("U")
S = TypeVar("S")


class Stream(Generic[T]):
    """A cons cell whose tail is evaluated on demand.

    The head may itself be a Thunk; it is forced when read, so a node is
    in weak head normal form: its shape is known, its contents need not be.
    """

    __slots__ = ("_head", "_tail")

    def __init__(self, head: T | Thunk[T], tail: Thunk[Stream[T]] | Stream[T]) -> None:
        self._head = head
        self._tail = tail

    @property
    def is_empty(self) -> bool:
        return False

    @property
    def head(self) -> T:
        return force(self._head)

    @property
    def tail(self) -> Stream[T]:
        return force(self._tail)

    def __iter__(self) -> Iterator[T]:
        node: Stream[T] = self
        while not node.is_empty:
            yield node.head
            node = node.tail

    def to_list(self) -> list[T]:
        """Materialize the stream. Never returns on an infinite stream."""
        return list(self)

    def take(self, n: int) -> Stream[T]:
        """The first n elements, lazily."""
        if n <= 0 or self.is_empty:
            return EMPTY
        if n == 1:
            # Do not force the source's next tail just to learn it is unused
            return Stream(self._head, EMPTY)
        return Stream(self._head, defer(lambda: self.tail.take(n - 1)))

    def drop(self, n: int) -> Stream[T]:
        """Everything after the first n elements.

        Each skipped head is forced in order. A head defined in terms of
        earlier heads (zip_with or map over the stream itself) then only
        ever reads memoized values, so reaching a deep node never builds
        a chain of suspended heads as long as the position.
        """
        node: Stream[T] = self
        while n > 0 and not node.is_empty:
            force(node._head)
            node = node.tail
            n -= 1
        return node

    def nth(self, n: int) -> T:
        node = self.drop(n)
        if node.is_empty:
            raise IndexError(f"Stream has fewer than {n + 1} elements")
        return node.head

    def map(self, fn: Callable[[T], U]) -> Stream[U]:
        if self.is_empty:
            return EMPTY
        return Stream(defer(lambda: fn(self.head)), defer(lambda: self.tail.map(fn)))

    def filter(self, pred: Callable[[T], bool]) -> Stream[T]:
        """Elements satisfying pred.

        Finds the first match eagerly and iteratively, so long runs of
        rejected elements never grow the stack. On an infinite stream
        with no further match this does not return.
        """
        node: Stream[T] = self
        while not node.is_empty and not pred(node.head):
            node = node.tail
        if node.is_empty:
            return EMPTY
        found = node
        return Stream(found._head, defer(lambda: found.tail.filter(pred)))

    def take_while(self, pred: Callable[[T], bool]) -> Stream[T]:
        if self.is_empty or not pred(self.head):
            return EMPTY
        return Stream(self._head, defer(lambda: self.tail.take_while(pred)))

    def zip_with(self, fn: Callable[[T, U], S], other: Stream[U]) -> Stream[S]:
        if self.is_empty or other.is_empty:
            return EMPTY
        return Stream(
            defer(lambda: fn(self.head, other.head)),
            defer(lambda: self.tail.zip_with(fn, other.tail)),
        )

    def __repr__(self) -> str:
        # Show only what has already been evaluated
        shown: list[str] = []
        node: Stream[Any] = self
        seen: set[int] = set()
        while not node.is_empty:
            if id(node) in seen:
                shown.append("...")
                break
            seen.add(id(node))
            head = node._head
            if isinstance(head, Thunk) and not head.evaluated:
                shown.append("?")
            else:
                shown.append(repr(force(head)))
            tail = node._tail
            if isinstance(tail, Thunk) and not tail.evaluated:
                shown.append("...")
                break
            node = force(tail)
        return f"Stream({', '.join(shown)})"


class _EmptyStream(Stream[Any]):
    """The end of every finite stream. Use the EMPTY singleton."""

    __slots__ = ()

    def __init__(self) -> None:
        pass

    @property
    def is_empty(self) -> bool:
        return True

    @property
    def head(self) -> Any:
        raise IndexError("head of empty stream")

    @property
    def tail(self) -> Stream[Any]:
        raise IndexError("tail of empty stream")

    def __repr__(self) -> str:
        return "EMPTY"


EMPTY: Stream[Any] = _EmptyStream()


def cons(head: T | Thunk[T], tail_fn: Callable[[], Stream[T]]) -> Stream[T]:
    """Build a node whose tail is tail_fn(), evaluated on first use."""
    return Stream(head, defer(tail_fn))


def iterate(fn: Callable[[T], T], seed: T) -> Stream[T]:
    """seed, fn(seed), fn(fn(seed)), ..."""
    return Stream(seed, defer(lambda: iterate(fn, fn(seed))))


def unfold(fn: Callable[[S], tuple[T, S] | None], seed: S) -> Stream[T]:
    """Grow a stream from seed. fn returns (value, next_seed), or None to stop."""
    produced = fn(seed)
    if produced is None:
        return EMPTY
    value, next_seed = produced
    return Stream(value, defer(lambda: unfold(fn, next_seed)))


def from_iterable(iterable: Iterable[T]) -> Stream[T]:
    """Wrap an iterable. Each element is pulled from it once, on demand."""
    it = iter(iterable)

    def build() -> Stream[T]:
        for item in it:
            return Stream(item, defer(build))
        return EMPTY

    return build()


def repeat(value: T) -> Stream[T]:
    """An infinite stream of value, backed by a single self-referencing node."""
    node: Stream[T] = Stream(value, EMPTY)
    node._tail = defer(lambda: node)
    return node
