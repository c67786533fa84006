"""
Miscellaneous utilities.
"""

import logging
import time
from functools import wraps
from typing import Callable


def now_ms() -> int:
    """Current time as epoch milliseconds, the timestamp format used on the wire."""
    return int(time.time() * 1000)


def timed(func) -> Callable:
    logger = logging.getLogger(func.__module__)

    @wraps(func)
    async def timed_func(*args, **kwargs):
        init = time.perf_counter()
        out = await func(*args, **kwargs)
        end = time.perf_counter() - init
        logger.debug(f"{func.__name__} finished in {1000 * end:.2f} ms")
        return out

    return timed_func
