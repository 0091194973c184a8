"""Named timing scopes reported through logging."""

from __future__ import annotations

import contextlib
import logging
import time
import typing as typ

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def perf_scope(name: str) -> typ.Iterator[None]:
    """Log the wall-clock duration of the wrapped block at DEBUG level.

    The duration is logged on every exit path, including when the block
    raises.

    Examples
    --------
    >>> with perf_scope("[Example] sleeping"):
    ...     pass
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug("%s took %.1f ms", name, elapsed_ms)


__all__ = ["perf_scope"]
