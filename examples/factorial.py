from __future__ import annotations

from byneed import Continue, Done, Trace, bounce, land, run_tail, trampoline


@trampoline
def factorial(acc: int, n: int) -> Continue | Done[int]:
    if n == 0:
        return land(acc)
    return bounce(acc * n, n - 1)


def main() -> None:
    print("5! =", factorial(1, 5))

    # Far beyond the interpreter's recursion limit
    bits = factorial(1, 5000).bit_length()
    print(f"5000! is {bits} bits long")

    trace = Trace()
    run_tail(factorial.__wrapped__, (1, 3), trace=trace)
    for ev in trace.get_events():
        print(f"  {ev.id:>2} {ev.action:<10} {ev.info}")


if __name__ == "__main__":
    main()
