"""Retry with exponential backoff for object-store calls.

Only transient failures are retried.  A failure is transient when the store
adapter raised ``TransientStoreError`` (already tagged with a ``RetryKind``)
or, for adapters that only surface plain exceptions, when the error text
carries one of the known transient signatures.  Everything else fails on
the first attempt.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable
from typing import TypeVar

import anyio
from loguru import logger

from switchyard.models.enums import RetryKind
from switchyard.store.base import TransientStoreError

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 1.0
DEFAULT_MAX_DELAY = 5.0

_SIGNATURES: tuple[tuple[re.Pattern[str], RetryKind], ...] = (
    (re.compile(r"\b429\b|too many requests|rate[ -]?limit|slow ?down", re.IGNORECASE), RetryKind.RATE_LIMITED),
    (re.compile(r"\b503\b|service unavailable|temporar", re.IGNORECASE), RetryKind.SERVICE_UNAVAILABLE),
    (re.compile(r"timeout|timed out", re.IGNORECASE), RetryKind.TIMEOUT),
)


class OperationError(RuntimeError):
    """Raised when a store operation failed for good.

    Either the failure was not retryable, or retries were exhausted.  The
    original exception is available as ``cause`` (and ``__cause__``).
    """

    def __init__(self, cause: BaseException, attempts: int, kind: RetryKind | None = None) -> None:
        super().__init__(f"Operation failed after {attempts} attempt(s): {cause}")
        self.cause = cause
        self.attempts = attempts
        self.kind = kind


def classify_error(exc: BaseException) -> RetryKind | None:
    """Return the transient failure category of ``exc``, or ``None`` if fatal."""
    if isinstance(exc, TransientStoreError):
        return exc.kind
    message = str(exc) or type(exc).__name__
    for pattern, kind in _SIGNATURES:
        if pattern.search(message):
            return kind
    return None


class RetryExecutor:
    """Run a zero-argument async operation, retrying transient failures.

    ``max_attempts`` counts retries after the first call, so an operation
    that keeps failing transiently runs ``max_attempts + 1`` times.  The
    delay before retry ``n`` is ``min(base_delay * 2 ** (n - 1), max_delay)``.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        *,
        base_delay: float = DEFAULT_BASE_DELAY,
        max_delay: float = DEFAULT_MAX_DELAY,
        sleep: Callable[[float], Awaitable[object]] = anyio.sleep,
    ) -> None:
        if max_attempts < 0:
            msg = f"max_attempts must be >= 0, got {max_attempts}"
            raise ValueError(msg)
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep

    def backoff(self, failures: int) -> float:
        """Delay in seconds after the ``failures``-th failed attempt."""
        return min(self.base_delay * 2 ** (failures - 1), self.max_delay)

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        failures = 0
        while True:
            try:
                return await operation()
            except Exception as exc:
                failures += 1
                kind = classify_error(exc)
                if kind is None or failures > self.max_attempts:
                    raise OperationError(exc, attempts=failures, kind=kind) from exc

                delay = self.backoff(failures)
                logger.warning(
                    "Retry: transient failure ({}), attempt {}/{}, sleeping {:.2f}s: {}",
                    kind,
                    failures,
                    self.max_attempts + 1,
                    delay,
                    exc,
                )
                await self._sleep(delay)
