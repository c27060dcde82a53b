"""Wall-clock timing helpers used by the experiment runners."""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass
from typing import Callable, Generator, Tuple, TypeVar

T = TypeVar("T")


@dataclass
class TimerResult:
    """Elapsed wall-clock time of a timed block, in seconds."""

    seconds: float


@contextlib.contextmanager
def timer() -> Generator[TimerResult, None, None]:
    """Context manager for wall-clock timing.

    Example
    -------
    >>> with timer() as t:
    ...     multiply(a, b, s=32)
    >>> print(t.seconds)
    """

    start = time.perf_counter()
    result = TimerResult(seconds=0.0)
    try:
        yield result
    finally:
        result.seconds = float(time.perf_counter() - start)


def time_function(func: Callable[[], T]) -> Tuple[T, TimerResult]:
    """Run a zero-argument callable and return ``(value, TimerResult)``."""

    with timer() as t:
        value = func()
    return value, t
