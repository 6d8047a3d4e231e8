# Copyright 2025-present DatusAI, Inc.
# Licensed under the Apache License, Version 2.0.
# See http://www.apache.org/licenses/LICENSE-2.0 for details.

"""
Connection lifecycle hooks.

``create_connection`` and ``destroy_connection`` wrap the functions that open
and close a warehouse connection with the host's cross-cutting reporting:
timing on success, an error log line on failure. They never change the
outcome of the wrapped call; failures are re-raised after being reported.
"""

import functools
import time
from typing import Any, Callable, TypeVar

from datus.utils.loggings import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _lifecycle_hook(operation: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    def decorator(fn: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            start = time.perf_counter()
            try:
                result = fn(*args, **kwargs)
            except Exception as e:
                logger.error(f"Redshift {operation} failed after {_elapsed_ms(start)}ms: {e}")
                raise
            logger.debug(f"Redshift {operation} took {_elapsed_ms(start)}ms")
            return result

        return wrapper

    return decorator


create_connection = _lifecycle_hook("create connection")
destroy_connection = _lifecycle_hook("destroy connection")


def execute_query(run: Callable[[], T]) -> T:
    """
    Run one statement through a zero-argument callable.

    No retry and no rewriting; any exception from ``run`` propagates unchanged
    so the caller can wrap it in its own error type.
    """
    start = time.perf_counter()
    result = run()
    logger.debug(f"Redshift query finished in {_elapsed_ms(start)}ms")
    return result
