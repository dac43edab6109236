from __future__ import annotations

import operator

from byneed import Stream, cons, defer, force, iterate, lazy


def primes() -> Stream[int]:
    """Trial-division primes, one candidate at a time."""
    found: list[int] = []

    def is_prime(n: int) -> bool:
        for p in found:
            if p * p > n:
                break
            if n % p == 0:
                return False
        found.append(n)
        return True

    return iterate(lambda n: n + 1, 2).filter(is_prime)


def main() -> None:
    fibs: Stream[int]
    fibs = cons(0, lambda: cons(1, lambda: fibs.zip_with(operator.add, fibs.tail)))
    print("fibs:", fibs.take(15).to_list())
    print("primes:", primes().take(15).to_list())

    @lazy
    def choose(flag: bool, then: object, otherwise: object) -> object:
        return force(then) if flag else force(otherwise)

    def explode() -> object:
        raise RuntimeError("never evaluated")

    print("choose:", force(choose(True, "left", defer(explode))))


if __name__ == "__main__":
    main()
