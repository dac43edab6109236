"""Tests for deferred value cells."""

from __future__ import annotations

import sys
import threading
import time

import pytest

from byneed import UNEVALUATED, Thunk, ThunkCycleError, defer, force, is_thunk, lazy
from fakes import CountingProducer, FlakyProducer


def test_defer_has_no_side_effect() -> None:
    producer = CountingProducer(1)
    cell = defer(producer)
    assert producer.calls == 0
    assert not cell.evaluated
    assert cell._value is UNEVALUATED


def test_force_twice_evaluates_once() -> None:
    producer = CountingProducer([1, 2, 3])
    cell = defer(producer)

    first = force(cell)
    second = force(cell)

    assert producer.calls == 1
    assert first == [1, 2, 3]
    assert first is second
    assert cell.evaluated


def test_shared_reference_observes_one_evaluation() -> None:
    log: list[str] = []

    def noisy() -> int:
        log.append("evaluated")
        return 7

    cell = defer(noisy)
    holders = [cell, cell, cell]
    assert [force(h) for h in holders] == [7, 7, 7]
    assert log == ["evaluated"]


@pytest.mark.parametrize("value", [0, None, "text", [1, 2], {"a": 1}, 3.5])
def test_force_is_identity_on_plain_values(value: object) -> None:
    assert force(value) is value


def test_chained_cells_collapse() -> None:
    innermost = CountingProducer("done")
    chain = defer(lambda: defer(lambda: defer(innermost)))

    assert force(chain) == "done"
    assert not is_thunk(chain._value)
    assert innermost.calls == 1


def test_chained_inner_cell_is_memoized_too() -> None:
    inner_producer = CountingProducer(5)
    inner = defer(inner_producer)
    outer = defer(lambda: inner)

    assert force(outer) == 5
    assert inner.evaluated
    assert force(inner) == 5
    assert inner_producer.calls == 1


def test_chain_deeper_than_recursion_limit_collapses() -> None:
    depth = sys.getrecursionlimit() * 3
    innermost = CountingProducer("bottom")
    cells = [defer(innermost)]
    for _ in range(depth):
        cells.append(defer(lambda c=cells[-1]: c))

    assert force(cells[-1]) == "bottom"
    assert innermost.calls == 1
    assert all(c.evaluated for c in cells)
    assert force(cells[depth // 2]) == "bottom"


def test_deep_threadsafe_chain_collapses() -> None:
    depth = sys.getrecursionlimit() * 2
    cell: Thunk[int] = defer(lambda: 1, threadsafe=True)
    for _ in range(depth):
        cell = defer(lambda c=cell: c, threadsafe=True)

    assert force(cell) == 1


def test_chain_stops_at_memoized_link() -> None:
    tail_producer = CountingProducer(9)
    tail = defer(tail_producer)
    force(tail)
    head = defer(lambda: defer(lambda: tail))

    assert force(head) == 9
    assert tail_producer.calls == 1


def test_failure_inside_chain_leaves_every_link_unevaluated() -> None:
    bottom = defer(FlakyProducer("ok", failures=1))
    middle = defer(lambda: bottom)
    top = defer(lambda: middle)

    with pytest.raises(RuntimeError):
        force(top)
    assert not top.evaluated
    assert not middle.evaluated
    assert not bottom.evaluated

    assert force(top) == "ok"
    assert middle.evaluated and bottom.evaluated


def test_chain_returning_to_itself_raises_cycle_error() -> None:
    a: Thunk[int]
    b = defer(lambda: a)
    a = defer(lambda: b)

    with pytest.raises(ThunkCycleError):
        force(a)
    assert not a._forcing and not b._forcing


def test_independent_cells_do_not_interfere() -> None:
    def make_cell() -> tuple[Thunk[int], CountingProducer]:
        producer = CountingProducer(42)
        return defer(producer), producer

    a, a_producer = make_cell()
    b, b_producer = make_cell()

    assert force(a) == 42
    assert a.evaluated
    assert not b.evaluated
    assert b_producer.calls == 0

    assert force(b) == 42
    assert a_producer.calls == 1
    assert b_producer.calls == 1


def test_failed_force_is_not_cached() -> None:
    producer = FlakyProducer("ok", failures=1)
    cell = defer(producer)

    with pytest.raises(RuntimeError, match="flaky failure #1"):
        force(cell)
    assert not cell.evaluated

    assert force(cell) == "ok"
    assert force(cell) == "ok"
    assert producer.calls == 2


def test_self_forcing_producer_raises_cycle_error() -> None:
    cell: Thunk[int]
    cell = defer(lambda: force(cell) + 1)

    with pytest.raises(ThunkCycleError):
        force(cell)
    assert not cell.evaluated


def test_cycle_through_chain_is_detected() -> None:
    a: Thunk[int]
    b = defer(lambda: force(a))
    a = defer(lambda: b)

    with pytest.raises(ThunkCycleError):
        force(a)


def test_producer_must_be_callable() -> None:
    with pytest.raises(TypeError, match="must be callable"):
        Thunk(42)  # type: ignore[arg-type]


def test_producer_released_after_evaluation() -> None:
    cell = defer(lambda: "x")
    force(cell)
    assert cell._producer is None


def test_map_is_lazy() -> None:
    producer = CountingProducer(10)
    doubled = defer(producer).map(lambda v: v * 2)

    assert producer.calls == 0
    assert force(doubled) == 20
    assert producer.calls == 1


def test_repr_reflects_state() -> None:
    cell = defer(lambda: 3)
    assert repr(cell) == "Thunk(<unevaluated>)"
    force(cell)
    assert repr(cell) == "Thunk(3)"


def test_lazy_decorator_defers_call() -> None:
    calls: list[tuple[int, int]] = []

    @lazy
    def add(x: int, y: int) -> int:
        calls.append((x, y))
        return x + y

    result = add(1, 2)
    assert is_thunk(result)
    assert calls == []
    assert force(result) == 3
    assert force(result) == 3
    assert calls == [(1, 2)]


def test_lazy_unused_argument_is_never_evaluated() -> None:
    expensive = CountingProducer("expensive")

    @lazy
    def choose(flag: bool, then: object, otherwise: object) -> object:
        return force(then) if flag else force(otherwise)

    assert force(choose(True, "cheap", defer(expensive))) == "cheap"
    assert expensive.calls == 0


def test_threadsafe_cell_evaluates_once_under_contention() -> None:
    calls: list[int] = []

    def slow() -> int:
        calls.append(1)
        time.sleep(0.05)
        return 99

    cell = defer(slow, threadsafe=True)
    results: list[int] = []
    start = threading.Barrier(8)

    def worker() -> None:
        start.wait()
        results.append(force(cell))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(calls) == 1
    assert results == [99] * 8
    assert cell.threadsafe


def test_threadsafe_cell_detects_cycle() -> None:
    cell: Thunk[int]
    cell = defer(lambda: force(cell), threadsafe=True)

    with pytest.raises(ThunkCycleError):
        force(cell)
