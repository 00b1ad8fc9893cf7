"""
Explicit success / failure results for analytics calls.

Analytics functions are pure and raise only on malformed data. The service
layer wraps each computation with ``capture`` so callers receive a
``Result`` instead of an exception, and the HTTP boundary decides how a
failure is rendered.

Usage:
    from scripts.lib.result import capture

    result = capture("summary", build_summary, deals, targets)
    if result.ok:
        return result.value
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from scripts.lib.errors import MetricComputationError, PulseError
from scripts.lib.logger import setup_logger

logger = setup_logger("result")

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a single analytics computation."""
    ok: bool
    value: Optional[T] = None
    error: Optional[PulseError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: PulseError) -> "Result[T]":
        return cls(ok=False, error=error)

    def unwrap(self) -> T:
        """Return the value or raise the carried error."""
        if not self.ok:
            raise self.error
        return self.value


def capture(metric: str, fn: Callable[..., T], *args, **kwargs) -> Result[T]:
    """
    Run ``fn`` and wrap its outcome.

    Any exception is logged with traceback and converted into a failed
    Result carrying a MetricComputationError. PulseErrors raised by ``fn``
    are kept as-is.
    """
    try:
        return Result.success(fn(*args, **kwargs))
    except PulseError as e:
        logger.error("Metric '%s' failed: %s", metric, e, exc_info=True)
        return Result.failure(e)
    except Exception as e:
        logger.error("Metric '%s' failed: %s", metric, e, exc_info=True)
        return Result.failure(MetricComputationError(metric, e))
