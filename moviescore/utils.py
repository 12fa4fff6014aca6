"""
Miscelaneous utilities.
"""

import asyncio
import math
import time
from functools import wraps
from typing import Awaitable, Callable, Optional, TypeVar

from moviescore.logger import logger

T = TypeVar("T")


def timed(func) -> Callable:
    @wraps(func)
    async def timed_func(*args, **kwargs):
        init = time.perf_counter()
        out = await func(*args, **kwargs)
        end = time.perf_counter() - init
        logger.info(f"{func.__name__} finished in {1000 * end:.2f} ms")
        return out
    return timed_func


async def read_or_none(awaitable: Awaitable[T], timeout: Optional[float], what: str) -> Optional[T]:
    """Await a store read, mapping a timeout to an absent value."""
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError:
        logger.warning(f"{what} timed out after {timeout} s, treating as absent")
        return None


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def is_finite_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
