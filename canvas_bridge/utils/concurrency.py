"""Scatter/gather helpers that never let one failure abort the batch."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class Settled(Generic[T]):
    """Outcome of one awaited task: either a value or the exception it raised."""

    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _settle(awaitable: Awaitable[T], timeout: float | None) -> Settled[T]:
    try:
        if timeout is None:
            value = await awaitable
        else:
            value = await asyncio.wait_for(awaitable, timeout)
    except asyncio.CancelledError:
        raise
    except Exception as exc:  # noqa: BLE001 - classified by the caller
        return Settled(error=exc)
    return Settled(value=value)


async def gather_settled(
    awaitables: Iterable[Awaitable[T]],
    *,
    timeout: float | None = None,
) -> List[Settled[T]]:
    """
    Run ``awaitables`` concurrently and return one ``Settled`` per input, in
    input order regardless of completion order.

    ``timeout`` bounds each awaitable individually; a timeout is reported as an
    ordinary failure of that member.
    """
    return list(await asyncio.gather(*(_settle(item, timeout) for item in awaitables)))


__all__ = ["Settled", "gather_settled"]
