"""Decorator utilities for cross-cutting concerns."""
import time
import logging
import functools
from typing import Any, Callable, TypeVar, cast

logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


def log_bulk_operation(func: F) -> F:
    """Log how long a bulk operation took and how many records it removed.

    The wrapped callable must return the number of affected records.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        started = time.perf_counter()
        try:
            count = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"{func.__qualname__} failed after {time.perf_counter() - started:.2f}s: {e}")
            raise
        logger.info(f"{func.__qualname__} removed {count} records in {time.perf_counter() - started:.2f}s")
        return count
    return cast(F, wrapper)
