from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from geocoding_core.errors import RequestCancelledError

T = TypeVar("T")


async def run_with_deadline(operation: Awaitable[T], timeout_seconds: float | None) -> T:
    if timeout_seconds is None:
        return await operation
    try:
        return await asyncio.wait_for(operation, timeout=timeout_seconds)
    except TimeoutError as exc:
        raise RequestCancelledError(f"operation exceeded its {timeout_seconds:g}s deadline") from exc
