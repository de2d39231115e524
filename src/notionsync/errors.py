"""Full error hierarchy for notionsync.

Every public error class inherits from :class:`NotionSyncError`.  Each
carries a machine-readable ``code`` (from :class:`ErrorCode`), a
human-readable ``message``, an optional structured ``context`` dict, and an
optional ``cause`` (chained exception).

Error codes are a :class:`str` enum so that they serialise naturally to
JSON and can be matched with simple ``==`` comparisons.

Two families exist:

* **Transport errors** raised by :mod:`notionsync.notion_api` for failed
  HTTP calls.  The sync layer never retries them itself; the transport has
  already applied its retry policy.
* **Sync errors** raised by the pull/push/diff operations: a missing page
  identity, a failed remote step, or unusable configuration.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the package can raise."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    PERMISSION_ERROR = "PERMISSION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    RATE_LIMITED = "RATE_LIMITED"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"
    NETWORK_ERROR = "NETWORK_ERROR"
    IDENTITY_ERROR = "IDENTITY_ERROR"
    STEP_FAILED = "STEP_FAILED"
    CONFIG_ERROR = "CONFIG_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class NotionSyncError(Exception):
    """Base exception for all notionsync errors.

    Parameters
    ----------
    code:
        Category of the error, normally an :class:`ErrorCode`.
    message:
        What went wrong, in words.
    context:
        Structured details; each subclass lists its keys.
    cause:
        The exception this one wraps, if any.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


class _CodedError(NotionSyncError):
    """Internal base for subclasses bound to a single :class:`ErrorCode`."""

    error_code: ErrorCode = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=self.error_code,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# API / transport errors
# ---------------------------------------------------------------------------

class NotionSyncValidationError(_CodedError):
    """Notion API returned 400: the request payload was invalid.

    Context keys: ``status_code``, ``notion_code``, ``body``.
    """

    error_code = ErrorCode.VALIDATION_ERROR


class NotionSyncAuthError(_CodedError):
    """Notion API returned 401: the integration token is invalid or expired."""

    error_code = ErrorCode.AUTH_ERROR


class NotionSyncPermissionError(_CodedError):
    """Notion API returned 403: the integration lacks access to the resource.

    Context keys: ``operation``.
    """

    error_code = ErrorCode.PERMISSION_ERROR


class NotionSyncNotFoundError(_CodedError):
    """Notion API returned 404: the requested resource does not exist.

    Context keys: ``path``.
    """

    error_code = ErrorCode.NOT_FOUND


class NotionSyncConflictError(_CodedError):
    """Notion API returned 409: a concurrent edit conflicted with the request."""

    error_code = ErrorCode.CONFLICT


class NotionSyncRetryExhaustedError(_CodedError):
    """Every attempt at a retryable request failed.

    Context keys: ``attempts``, ``last_status_code``.
    """

    error_code = ErrorCode.RETRY_EXHAUSTED


class NotionSyncRateLimitError(NotionSyncRetryExhaustedError):
    """Notion kept answering 429 until the attempts ran out.

    Context keys: ``attempts``, ``last_status_code``,
    ``retry_after_seconds`` (the last ``Retry-After`` value, or ``None``).
    """

    error_code = ErrorCode.RATE_LIMITED


class NotionSyncNetworkError(_CodedError):
    """No response arrived: timeout, DNS failure or dropped connection.

    Context keys: ``url``, ``attempt``.
    """

    error_code = ErrorCode.NETWORK_ERROR


# ---------------------------------------------------------------------------
# Sync errors
# ---------------------------------------------------------------------------

class NotionSyncIdentityError(_CodedError):
    """A local file has no usable ``notion_id`` in its header.

    Fatal for push and diff; there is nothing to retry.

    Context keys: ``file_path``.
    """

    error_code = ErrorCode.IDENTITY_ERROR


class NotionSyncStepError(_CodedError):
    """A remote call failed in the middle of a pull or push.

    Calls completed before the failing step are not undone; partially
    appended batches stay on the page.

    Context keys: ``step``, ``page_id``, plus step-specific keys such as
    ``block_id`` or ``batch``.
    """

    error_code = ErrorCode.STEP_FAILED

    @property
    def step(self) -> str:
        return str(self.context.get("step", ""))


class NotionSyncConfigError(_CodedError):
    """The client could not be configured (e.g. no token available).

    Context keys: ``env_var``, ``env_file``.
    """

    error_code = ErrorCode.CONFIG_ERROR
