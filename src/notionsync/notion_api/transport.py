"""Synchronous HTTP transport for the Notion API.

One call to :meth:`NotionTransport.request` runs this loop:

1. take a token from the rate limiter;
2. send the request with the auth and ``Notion-Version`` headers;
3. return the decoded JSON body on ``2xx``;
4. on ``429``, ``5xx`` or a network failure, back off and try again;
5. on any other ``4xx``, raise the matching typed error at once;
6. once the attempts run out, raise :class:`NotionSyncRetryExhaustedError`
   (or :class:`NotionSyncNetworkError` if no response ever arrived).

Every request is bounded by ``timeout_seconds``.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from collections.abc import Iterator
from typing import Any

import httpx

from notionsync.config import NotionSyncConfig
from notionsync.errors import (
    NotionSyncAuthError,
    NotionSyncConflictError,
    NotionSyncError,
    NotionSyncNetworkError,
    NotionSyncNotFoundError,
    NotionSyncPermissionError,
    NotionSyncRateLimitError,
    NotionSyncRetryExhaustedError,
    NotionSyncValidationError,
)
from notionsync.observability import get_logger, log_event, resolve_metrics
from notionsync.utils.redact import redact

from .rate_limit import TokenBucket
from .retries import RETRYABLE_STATUSES, compute_backoff, parse_retry_after, should_retry

log = get_logger("notionsync.transport")

PAGE_SIZE = 100
"""Largest ``page_size`` Notion accepts on list endpoints."""

# Non-retryable statuses and the error raised for each.
_STATUS_ERRORS: dict[int, tuple[type[NotionSyncError], str]] = {
    400: (NotionSyncValidationError, "Validation error"),
    401: (NotionSyncAuthError, "Authentication failed"),
    403: (NotionSyncPermissionError, "Permission denied"),
    404: (NotionSyncNotFoundError, "Resource not found"),
    409: (NotionSyncConflictError, "Conflict"),
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text[:1000]


def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
    """Raise the typed error for a non-retryable ``4xx`` *response*."""
    status = response.status_code
    body = _response_body(response)
    if not isinstance(body, dict):
        body = {}
    notion_message = body.get("message", response.text[:500])
    notion_code = body.get("code", "")

    error_cls, label = _STATUS_ERRORS.get(
        status, (NotionSyncValidationError, f"Client error {status}")
    )
    context: dict[str, Any] = {"status_code": status, "notion_code": notion_code}
    if error_cls is NotionSyncValidationError:
        context["body"] = body
    elif error_cls is NotionSyncPermissionError:
        context["operation"] = f"{method} {path}"
    elif error_cls is NotionSyncNotFoundError:
        context["path"] = path

    raise error_cls(
        message=f"{label} on {method} {path}: {notion_message}",
        context=context,
    )


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class NotionTransport:
    """HTTP transport with auth, pacing and retries.

    Parameters
    ----------
    config:
        Supplies credentials, timeouts, retry and pacing knobs.
    client:
        Pre-built :class:`httpx.Client`.  Tests pass one backed by
        :class:`httpx.MockTransport`; normally it is created here.
    """

    def __init__(self, config: NotionSyncConfig, client: httpx.Client | None = None) -> None:
        self._config = config
        self._bucket = TokenBucket(rate_rps=config.rate_limit_rps)
        self._metrics = resolve_metrics(config.metrics)
        self._client = client or httpx.Client(
            base_url=config.base_url,
            headers={
                "Authorization": f"Bearer {config.token}",
                "Notion-Version": config.notion_version,
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(config.timeout_seconds),
            proxy=config.http_proxy,
        )

    # -- public API --------------------------------------------------------

    def request(self, method: str, path: str, **kwargs: Any) -> dict:
        """Send one API call, retrying transient failures.

        Parameters
        ----------
        method:
            HTTP verb.
        path:
            Path relative to ``base_url``, e.g. ``/blocks/{id}/children``.
        **kwargs:
            Passed to :meth:`httpx.Client.request` (``json=``, ``params=``).

        Returns
        -------
        dict
            The decoded response body, ``{}`` for empty responses.

        Raises
        ------
        NotionSyncValidationError, NotionSyncAuthError,
        NotionSyncPermissionError, NotionSyncNotFoundError,
        NotionSyncConflictError
            For the matching non-retryable ``4xx`` status.
        NotionSyncRateLimitError
            When every attempt was answered with ``429``.
        NotionSyncRetryExhaustedError
            When every attempt got a retryable status.
        NotionSyncNetworkError
            When the last attempt failed without a response.
        """
        max_attempts = self._config.retry_max_attempts
        last_status: int | None = None
        retry_after: float | None = None

        for attempt in range(max_attempts):
            waited = self._bucket.acquire()
            if waited > 0:
                self._metrics.timing("notionsync.rate_limit_wait_ms", waited * 1000)

            started = time.monotonic()
            try:
                response = self._client.request(method, path, **kwargs)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                self._metrics.increment(
                    "notionsync.requests_total", tags={"method": method, "status": "error"}
                )
                log_event(
                    log, logging.WARNING, "request_network_error",
                    method=method, path=path, attempt=attempt + 1, error=str(exc),
                )
                if not should_retry(None, exc, attempt, max_attempts):
                    raise NotionSyncNetworkError(
                        message=f"Network error on {method} {path}: {exc}",
                        context={"url": path, "attempt": attempt + 1},
                        cause=exc,
                    ) from exc
                self._sleep_before_retry(attempt, "network_error")
                continue

            elapsed_ms = (time.monotonic() - started) * 1000
            status = response.status_code
            last_status = status
            tags = {"method": method, "status": str(status)}
            self._metrics.increment("notionsync.requests_total", tags=tags)
            self._metrics.timing("notionsync.request_duration_ms", elapsed_ms, tags=tags)
            if self._config.debug_dump_payload:
                self._dump(method, response, kwargs.get("json"))

            if 200 <= status < 300:
                if status == 204 or not response.content:
                    return {}
                return response.json()

            if status not in RETRYABLE_STATUSES:
                _raise_for_status(response, method, path)

            retry_after = None
            if status == 429:
                retry_after = parse_retry_after(response.headers.get("retry-after"))

            if not should_retry(status, None, attempt, max_attempts):
                break

            reason = "server_error"
            if status == 429:
                reason = "rate_limited"
                self._metrics.increment("notionsync.rate_limited_total")
                log_event(
                    log, logging.WARNING, "rate_limited",
                    method=method, path=path, retry_after=retry_after, attempt=attempt + 1,
                )
            self._sleep_before_retry(attempt, reason, retry_after)

        context = {"attempts": max_attempts, "last_status_code": last_status}
        if last_status == 429:
            raise NotionSyncRateLimitError(
                message=f"Still rate limited after {max_attempts} attempts for {method} {path}",
                context={**context, "retry_after_seconds": retry_after},
            )
        raise NotionSyncRetryExhaustedError(
            message=(
                f"All {max_attempts} attempts exhausted for {method} {path} "
                f"(last status: {last_status})"
            ),
            context=context,
        )

    def paginate(self, path: str, *, method: str = "GET", **kwargs: Any) -> Iterator[dict]:
        """Yield every item of a cursor-paginated list endpoint.

        ``GET`` endpoints receive ``page_size``/``start_cursor`` as query
        parameters; ``POST`` endpoints (database queries) in the JSON body.
        """
        location = "json" if method.upper() == "POST" else "params"
        base: dict = dict(kwargs.pop(location, None) or {})
        cursor: str | None = None

        while True:
            page_args = {**base, "page_size": base.get("page_size", PAGE_SIZE)}
            if cursor is not None:
                page_args["start_cursor"] = cursor
            data = self.request(method, path, **{location: page_args}, **kwargs)
            yield from data.get("results", [])

            cursor = data.get("next_cursor")
            if not data.get("has_more", False) or cursor is None:
                return

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> NotionTransport:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # -- internals ---------------------------------------------------------

    def _sleep_before_retry(
        self, attempt: int, reason: str, retry_after: float | None = None
    ) -> None:
        delay = compute_backoff(
            attempt,
            base=self._config.retry_base_delay,
            maximum=self._config.retry_max_delay,
            jitter=self._config.retry_jitter,
            retry_after=retry_after,
        )
        self._metrics.increment("notionsync.retries_total", tags={"reason": reason})
        time.sleep(delay)

    def _dump(self, method: str, response: httpx.Response, payload: Any) -> None:
        """Write a redacted request/response dump to stderr."""
        dump: dict[str, Any] = {
            "method": method,
            "url": str(response.url),
            "response_status": response.status_code,
            "response_body": _response_body(response),
        }
        if payload is not None:
            dump["request_body"] = payload
        print(
            json.dumps(redact(dump, self._config.token), indent=2, default=str),
            file=sys.stderr,
        )
