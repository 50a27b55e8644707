"""
Utility functions for RoundSight.

Safe conversions for loosely typed decoder records, and a timing decorator.
"""

import logging
import math
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def timed(func: F) -> F:
    """
    Decorator to measure and log function execution time at DEBUG level.

    Usage:
        @timed
        def my_function():
            ...
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = time.perf_counter() - start_time
        logger.debug(f"{func.__name__} completed in {elapsed * 1000:.2f}ms")
        return result

    return wrapper  # type: ignore


def _is_nan(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


def safe_int(value: Any, default: int = 0) -> int:
    """Safely convert a value to int."""
    if value is None or _is_nan(value):
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def safe_float(value: Any, default: float = 0.0) -> float:
    """Safely convert a value to float. NaN becomes the default."""
    if value is None:
        return default
    try:
        result = float(value)
    except (ValueError, TypeError):
        return default
    return default if math.isnan(result) else result


def safe_str(value: Any, default: str = "") -> str:
    """Safely convert a value to a stripped string."""
    if value is None or _is_nan(value):
        return default
    return str(value).strip()


def safe_bool(value: Any, default: bool = False) -> bool:
    """
    Safely convert a value to bool.

    Accepts real booleans, numbers and the strings "true"/"false"/"1"/"0".
    """
    if value is None or _is_nan(value):
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no", ""):
            return False
    return default


def clock_to_seconds(clock: str) -> float | None:
    """
    Convert a round clock string ("m:ss" or "ss") to seconds.

    Returns None when the string cannot be parsed.
    """
    clock = clock.strip()
    if not clock:
        return None
    try:
        if ":" in clock:
            minutes, seconds = clock.split(":", 1)
            return int(minutes) * 60 + float(seconds)
        return float(clock)
    except ValueError:
        return None
