"""Bounded worker pool."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class WorkerFailure:
    """Recorded in place of a result when the handler raised."""

    error: str
    failed: bool = True


async def run_with_limit(
    items: Sequence[T],
    limit: int,
    handler: Callable[[T, int], Awaitable[R]],
) -> list[R | WorkerFailure]:
    """Run ``handler`` over ``items`` with at most ``limit`` calls in flight.

    ``min(limit, len(items))`` workers pull the next unclaimed index from a
    shared cursor until the items run out. ``result[i]`` always belongs to
    ``items[i]``. A handler exception is recorded as a ``WorkerFailure`` at
    its index and never stops the other workers; cancellation propagates.

    The cursor is only read and advanced between awaits, which is safe on a
    single event loop.
    """
    if limit < 1:
        msg = f"limit must be at least 1, got {limit}"
        raise ValueError(msg)

    results: list[R | WorkerFailure | None] = [None] * len(items)
    cursor = 0

    async def worker() -> None:
        nonlocal cursor
        while cursor < len(items):
            index = cursor
            cursor += 1
            try:
                results[index] = await handler(items[index], index)
            except Exception as e:
                logger.debug("Pool item %d failed: %s", index, e)
                results[index] = WorkerFailure(error=str(e) or type(e).__name__)

    await asyncio.gather(*(worker() for _ in range(min(limit, len(items)))))
    return results  # type: ignore[return-value]
