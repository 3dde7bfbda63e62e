import time
from functools import wraps
from typing import Dict, Optional

from config.logging_config import logger


class Timer:
    def __init__(self, label: str = ""):
        self.label = label
        self.elapsed: Optional[float] = None
        self._start: Optional[float] = None

    def __enter__(self):
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - self._start
        status = "failed" if exc_type else "done"
        logger.debug(f"[TIME] {self.label} {status}: {self.elapsed * 1000:.2f} ms")


def async_timed(label: str = None, store: Optional[Dict[str, float]] = None):
    """Log (and optionally record) the wall time of a coroutine."""
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            key = label or func.__name__
            with Timer(key) as timer:
                result = await func(*args, **kwargs)
            if store is not None:
                store[key] = timer.elapsed
            return result
        return wrapper
    return decorator


def timed(label: str = None, store: Optional[Dict[str, float]] = None):
    """Log (and optionally record) the wall time of a function call."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            key = label or func.__name__
            with Timer(key) as timer:
                result = func(*args, **kwargs)
            if store is not None:
                store[key] = timer.elapsed
            return result
        return wrapper
    return decorator
