"""Internal async helpers shared by async modules."""

from __future__ import annotations

import inspect
from typing import Any


async def _maybe_await(value: Any) -> Any:
    """Await awaitables and return non-awaitable values unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


async def _close_quietly(cursor: Any) -> None:
    """Close a cursor that may expose a sync or async `close()`."""
    close = getattr(cursor, "close", None)
    if callable(close):
        await _maybe_await(close())
