"""Small helpers shared by the sync and async dispatchers."""

from __future__ import annotations

import inspect
from typing import Any


def clamp(value: float, minimum: float, maximum: float) -> float:
    return max(min(value, maximum), minimum)


def reject_awaitable(value: Any, operation: str) -> None:
    """Fail loudly when a synchronous caller receives a coroutine from a store."""

    if inspect.isawaitable(value):
        if inspect.iscoroutine(value):
            value.close()
        raise TypeError(f"store.{operation} returned an awaitable; use AsyncFcmClient with async stores")


async def maybe_await(value: Any) -> Any:
    """Await ``value`` when a store method returned a coroutine."""

    if inspect.isawaitable(value):
        return await value
    return value


__all__ = ["clamp", "maybe_await", "reject_awaitable"]
