"""Timeout utilities for resource-limited operations."""

import asyncio
from typing import Awaitable, TypeVar

T = TypeVar("T")


async def with_timeout(awaitable: Awaitable[T], timeout_seconds: float) -> T:
    """Await ``awaitable`` with timeout protection.

    Args:
        awaitable: Coroutine or future to wait for.
        timeout_seconds: Maximum time to wait in seconds.
            If 0 or negative, no timeout is applied.

    Returns:
        Result of the awaitable.

    Raises:
        TimeoutError: If the awaitable does not complete within timeout_seconds.

    Note:
        Work running on an executor thread (such as a native PDFium render)
        cannot be interrupted. On timeout the caller stops waiting, but the
        thread keeps running until the native call returns.
    """
    if timeout_seconds <= 0:
        return await awaitable

    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError as e:
        raise TimeoutError(
            f"Render attempt timed out after {timeout_seconds} seconds. "
            f"Page may be complex. "
            f"To process: set PDF2IMG_RENDER_TIMEOUT={int(timeout_seconds * 2)} "
            f"environment variable, "
            f"or use ResourceLimits(render_timeout={int(timeout_seconds * 2)}) "
            f"in Python API."
        ) from e
