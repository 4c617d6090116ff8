from __future__ import annotations

import asyncio

import pytest

from canvas_bridge.utils.concurrency import gather_settled


async def _value_after(value, delay: float):
    await asyncio.sleep(delay)
    return value


async def _boom(message: str):
    raise RuntimeError(message)


@pytest.mark.asyncio
async def test_results_keep_input_order() -> None:
    outcomes = await gather_settled(
        [_value_after("slow", 0.05), _value_after("fast", 0), _value_after("mid", 0.01)]
    )

    assert [outcome.value for outcome in outcomes] == ["slow", "fast", "mid"]
    assert all(outcome.ok for outcome in outcomes)


@pytest.mark.asyncio
async def test_failures_do_not_abort_siblings() -> None:
    outcomes = await gather_settled([_boom("first"), _value_after(2, 0)])

    assert not outcomes[0].ok
    assert isinstance(outcomes[0].error, RuntimeError)
    assert str(outcomes[0].error) == "first"
    assert outcomes[1].ok and outcomes[1].value == 2


@pytest.mark.asyncio
async def test_timeout_is_reported_per_member() -> None:
    outcomes = await gather_settled(
        [_value_after("late", 1), _value_after("on time", 0)], timeout=0.05
    )

    assert isinstance(outcomes[0].error, asyncio.TimeoutError)
    assert outcomes[1].value == "on time"


@pytest.mark.asyncio
async def test_empty_input() -> None:
    assert await gather_settled([]) == []
