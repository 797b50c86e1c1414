# Run blocking provider SDK calls off the event loop with a bounded wait.

from __future__ import annotations

import asyncio
import functools
from typing import Any, Callable, Optional, TypeVar

from portfolio_bot.errors import ErrorKind, ProviderError

T = TypeVar("T")


async def run_blocking(
    fn: Callable[..., T],
    *args: Any,
    timeout: Optional[float] = None,
    provider: Optional[str] = None,
    **kwargs: Any,
) -> T:
    """Call ``fn`` in a worker thread; a timeout becomes ProviderError(TIMEOUT)."""
    call = functools.partial(fn, *args, **kwargs)
    try:
        return await asyncio.wait_for(asyncio.to_thread(call), timeout=timeout)
    except asyncio.TimeoutError as e:
        name = getattr(fn, "__qualname__", repr(fn))
        raise ProviderError(ErrorKind.TIMEOUT, f"{name} timed out after {timeout}s", provider) from e
