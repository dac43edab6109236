"""Tests for the async runners."""

from __future__ import annotations

import asyncio

import pytest

from byneed import Continue, Done, RunnerConfig, StepError, StepLimitExceeded, arun_body, arun_tail, bounce, land
from fakes import ReplayLog, factorial_step, right_fold_sub_step


@pytest.mark.asyncio
async def test_arun_tail_with_sync_step() -> None:
    assert await arun_tail(factorial_step, (1, 5)) == 120


@pytest.mark.asyncio
async def test_arun_tail_with_coroutine_step() -> None:
    async def countdown(n: int) -> Continue | Done[str]:
        await asyncio.sleep(0)
        if n == 0:
            return land("done")
        return bounce(n - 1)

    assert await arun_tail(countdown, (5_000,)) == "done"


@pytest.mark.asyncio
async def test_arun_body_matches_sync_result() -> None:
    assert await arun_body(right_fold_sub_step([1, 2, 3, 4, 5]), (0,)) == 3


@pytest.mark.asyncio
async def test_arun_body_with_async_post_processing() -> None:
    async def step(i: int) -> Continue | Done[list[int]]:
        if i == 3:
            return land([])

        async def append(acc: list[int]) -> list[int]:
            await asyncio.sleep(0)
            return acc + [i]

        return bounce(i + 1, then=append)

    assert await arun_body(step, (0,)) == [2, 1, 0]


@pytest.mark.asyncio
async def test_arun_body_short_circuits() -> None:
    log = ReplayLog()

    def step(i: int) -> Continue | Done[int]:
        if i == 5:
            return land(0)
        return bounce(i + 1, then=log.adder(i, 10, threshold=15))

    assert await arun_body(step, (0,)) == 20
    assert log.entries == [4, 3]


@pytest.mark.asyncio
async def test_arun_tail_rejects_malformed_step() -> None:
    async def bad(n: int) -> int:
        return n

    with pytest.raises(StepError):
        await arun_tail(bad, (1,))


@pytest.mark.asyncio
async def test_arun_tail_respects_max_steps() -> None:
    async def forever(n: int) -> Continue:
        return bounce(n + 1)

    with pytest.raises(StepLimitExceeded):
        await arun_tail(forever, (0,), config=RunnerConfig(max_steps=3))
