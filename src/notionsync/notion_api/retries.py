"""Retry policy for Notion API calls.

:func:`should_retry` decides whether another attempt is worthwhile and
:func:`compute_backoff` says how long to wait before it.
"""

from __future__ import annotations

import random

import httpx

# Throttling and transient server failures.
RETRYABLE_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})

RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
)


def should_retry(
    status_code: int | None,
    exception: Exception | None,
    attempt: int,
    max_attempts: int,
) -> bool:
    """Return ``True`` if attempt number *attempt* (0-based) may be repeated.

    Parameters
    ----------
    status_code:
        Status of the failed response, ``None`` when no response arrived.
    exception:
        The transport exception, ``None`` when a response arrived.
    attempt:
        Index of the attempt that just failed.
    max_attempts:
        Total attempts allowed, the first one included.
    """
    if attempt + 1 >= max_attempts:
        return False
    if exception is not None:
        return isinstance(exception, RETRYABLE_EXCEPTIONS)
    return status_code in RETRYABLE_STATUSES


def compute_backoff(
    attempt: int,
    base: float = 1.0,
    maximum: float = 60.0,
    jitter: bool = True,
    retry_after: float | None = None,
) -> float:
    """Seconds to wait before retrying after attempt *attempt*.

    A server-supplied ``Retry-After`` wins; otherwise the delay doubles per
    attempt from *base* up to *maximum*.  Jitter scales the result into
    ``[50%, 100%]`` of its value.
    """
    delay = retry_after if retry_after is not None else min(base * (2**attempt), maximum)
    if jitter:
        delay *= 0.5 + random.random() * 0.5
    return delay


def parse_retry_after(raw: str | None) -> float | None:
    """Parse a ``Retry-After`` header holding a number of seconds."""
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value >= 0 else None
