"""Naive Fibonacci recurses twice per step, so it has no run_body shape.

Keeping the pending subproblems on an explicit worklist turns it into a
tail-recursive step function.
"""

from __future__ import annotations

from byneed import Continue, Done, bounce, land, run_tail


def fib_step(todo: list[int], total: int) -> Continue | Done[int]:
    if not todo:
        return land(total)
    n = todo.pop()
    if n < 2:
        return bounce(todo, total + n)
    todo.extend((n - 1, n - 2))
    return bounce(todo, total)


def fib(n: int) -> int:
    return run_tail(fib_step, ([n], 0))


if __name__ == "__main__":
    print([fib(n) for n in range(15)])
