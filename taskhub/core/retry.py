"""Bounded retry with a linear delay schedule.

Used for profile loads and profile creation only; every other read or write
fails immediately and is surfaced to the caller.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from taskhub.config import settings

logger = logging.getLogger(__name__)


def _always(_: BaseException) -> bool:
    return True


def describe_error(error: Optional[BaseException]) -> dict:
    """Pull PostgREST error fields (code, details, hint, message) for logging."""
    if error is None:
        return {}
    return {
        "code": getattr(error, "code", None),
        "details": getattr(error, "details", None),
        "hint": getattr(error, "hint", None),
        "message": getattr(error, "message", None) or str(error),
    }


class RetryError(Exception):
    def __init__(self, last_error: BaseException, attempts: int):
        super().__init__(str(last_error))
        self.last_error = last_error
        self.attempts = attempts


@dataclass
class RetryPolicy:
    attempts: int = 3
    delay: float = 1.0
    retry_on: Callable[[BaseException], bool] = _always
    sleep: Callable[[float], Any] = field(default=time.sleep, repr=False)

    @classmethod
    def for_profiles(cls, **overrides) -> "RetryPolicy":
        params = {
            "attempts": settings.profile_retry_attempts,
            "delay": settings.profile_retry_delay_seconds,
        }
        params.update(overrides)
        return cls(**params)

    def delay_for(self, attempt: int) -> float:
        """Delay after the given (1-based) failed attempt: delay, 2*delay, ..."""
        return self.delay * attempt

    def call(self, fn: Callable, *args, description: str = "operation", **kwargs):
        last_error: Optional[BaseException] = None
        for attempt in range(1, self.attempts + 1):
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                if not self.retry_on(e):
                    raise
                last_error = e
                logger.error(f"{description} attempt {attempt} failed: {describe_error(e)}")
                if attempt < self.attempts:
                    self.sleep(self.delay_for(attempt))
        logger.error(f"{description} failed after {self.attempts} attempts: {describe_error(last_error)}")
        raise RetryError(last_error, self.attempts)
