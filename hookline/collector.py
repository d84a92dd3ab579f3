"""Concurrent collection of awaitables contributed to a hook."""

from __future__ import annotations

import asyncio
import inspect
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hookline.engine import FilterEngine


async def _resolved(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def close_pending(values: list[Any]) -> None:
    """Close coroutines that will never be awaited because collection failed."""
    for value in values:
        if inspect.iscoroutine(value):
            value.close()


async def gather_in_order(values: list[Any]) -> list[Any]:
    """Await every member of ``values`` concurrently, keeping list order.

    Plain values pass through. On the first failure the remaining tasks are
    cancelled and the exception propagates.
    """
    tasks = [asyncio.ensure_future(_resolved(value)) for value in values]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


async def run_callbacks(engine: FilterEngine, hook_id: str, args: dict[str, Any] | None = None) -> list[Any]:
    pending = engine.apply_filters(hook_id, [], args if args is not None else {})
    return await gather_in_order(list(pending or []))
