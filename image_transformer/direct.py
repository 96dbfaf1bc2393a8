"""Utilities for building stateless request/response actions."""

import asyncio
import functools
from concurrent.futures import Executor
from typing import Any, Callable

from fastapi import Response
from fastapi.responses import PlainTextResponse


async def run_blocking(
    func: Callable[..., Any],
    *args: Any,
    executor: Executor | None = None,
    timeout: float | None = None,
    **kwargs: Any,
) -> Any:
    """
    Run a blocking function off the event loop.

    Uses ``executor`` when given, otherwise the loop's default thread pool.
    With ``timeout`` set, raises ``asyncio.TimeoutError`` once it expires; the
    worker thread itself cannot be interrupted and finishes in the background.
    """

    if executor is None:
        pending = asyncio.to_thread(func, *args, **kwargs)
    else:
        loop = asyncio.get_running_loop()
        pending = loop.run_in_executor(executor, functools.partial(func, *args, **kwargs))

    if timeout is None:
        return await pending
    return await asyncio.wait_for(pending, timeout)


def render_bytes(payload: bytes | bytearray | memoryview, media_type: str) -> Response:
    """
    Shortcut for returning binary payloads from stateless actions.
    """

    return Response(content=bytes(payload), media_type=media_type)


def render_text(message: str, status_code: int) -> Response:
    """Plain-text error body with the given status."""
    return PlainTextResponse(content=message, status_code=status_code)


__all__ = ["run_blocking", "render_bytes", "render_text"]
