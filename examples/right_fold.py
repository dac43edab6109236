from __future__ import annotations

import operator

from byneed import Continue, Done, bounce, fold_right, fold_right_until, land, run_body


def fold_sub_step(xs: list[int]):
    def step(i: int) -> Continue | Done[int]:
        if i == len(xs):
            return land(0)
        x = xs[i]
        return bounce(i + 1, then=lambda r: x - r)

    return step


def main() -> None:
    print("foldr (-) 0 [1..5] =", run_body(fold_sub_step([1, 2, 3, 4, 5]), (0,)))
    print("foldr (-) 0 [1..100000] =", fold_right(operator.sub, 0, range(1, 100_001)))

    total = fold_right_until(operator.add, 0, range(1, 1001), lambda acc: acc > 5000)
    print("first right-fold total over 5000:", total)


if __name__ == "__main__":
    main()
