"""Scrub request and response payloads before they are dumped.

:func:`redact` masks the integration token wherever it appears, blanks
values under credential-like keys and hides user e-mail addresses that
Notion returns in ``person`` objects.
"""

from __future__ import annotations

import copy
import re
from typing import Any

_BEARER_RE = re.compile(r"(Bearer\s+)\S+")

# A key containing any of these (case-insensitive) has its value masked.
_SENSITIVE_KEYS: tuple[str, ...] = (
    "token",
    "secret",
    "password",
    "authorization",
    "cookie",
    "api_key",
    "email",
)


def _mask(value: str, token: str | None) -> str:
    if token and token in value:
        suffix = token[-4:] if len(token) >= 8 else "****"
        value = value.replace(token, f"<redacted:...{suffix}>")
    return _BEARER_RE.sub(lambda m: f"{m.group(1)}<redacted>", value)


def _redact_value(value: Any, token: str | None) -> Any:
    if isinstance(value, dict):
        return _redact_dict(value, token)
    if isinstance(value, list):
        return [_redact_value(item, token) for item in value]
    if isinstance(value, str):
        return _mask(value, token)
    return value


def _redact_dict(data: dict, token: str | None) -> dict:
    result: dict = {}
    for key, value in data.items():
        lowered = key.lower() if isinstance(key, str) else ""
        if any(marker in lowered for marker in _SENSITIVE_KEYS):
            if isinstance(value, str) and "authorization" in lowered:
                result[key] = _mask(value, token)
            else:
                result[key] = "<redacted>"
        else:
            result[key] = _redact_value(value, token)
    return result


def redact(payload: dict, token: str | None = None) -> dict:
    """Return a redacted deep copy of *payload*.

    Parameters
    ----------
    payload:
        Headers, request body or response body.
    token:
        The integration token; every occurrence is replaced.

    Returns
    -------
    dict
        A new dict.  *payload* itself is left untouched.

    >>> redact({"Authorization": "Bearer secret_abc"})
    {'Authorization': 'Bearer <redacted>'}
    """
    return _redact_dict(copy.deepcopy(payload), token)
