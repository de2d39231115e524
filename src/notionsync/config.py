"""Client configuration for notionsync.

:class:`NotionSyncConfig` is a plain dataclass that captures every
tuneable knob of the sync client: API access, retry and pacing behaviour,
the batching used when appending blocks, and the push policy for child
pages and the local comments section.

:func:`load_token` resolves the integration token from the environment or
a ``.env`` file.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from notionsync.errors import NotionSyncConfigError

TOKEN_ENV_VAR = "NOTION_API_KEY"
"""Environment variable (and ``.env`` key) holding the integration token."""


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass
class NotionSyncConfig:
    """Complete configuration for a notionsync client.

    Only ``token`` has to be given; the defaults suit a single user syncing
    a handful of pages.

    Parameters
    ----------
    token:
        Internal integration secret.  Masked in ``repr`` and payload dumps.
    notion_version:
        API version sent as ``Notion-Version``.
    base_url:
        Root of the REST API; point it at a local stub in tests.
    retry_max_attempts:
        Maximum number of attempts per request for retryable HTTP errors.
    retry_base_delay:
        First backoff delay in seconds; doubled per attempt.
    retry_max_delay:
        Longest backoff delay in seconds.
    retry_jitter:
        Add random jitter to backoff intervals.
    rate_limit_rps:
        Average request rate allowed by the token bucket.
    timeout_seconds:
        HTTP request timeout in seconds.  Every remote call is bounded by it.
    http_proxy:
        Proxy URL passed to httpx, if any.
    append_batch_size:
        Maximum number of blocks per ``append_children`` call.  Notion
        rejects more than 100.
    append_delay_seconds:
        Fixed pause between two consecutive append batches.
    default_output_dir:
        Directory used by :meth:`NotionSyncClient.pull` when the caller
        does not pass one.
    restore_mode:
        How child pages displaced by a full replace are brought back.

        * ``"unarchive"``: ``PATCH /pages/{id}`` with ``archived=false``.
        * ``"reparent"``: also re-send the parent page id.
    push_comment_section:
        When ``True`` the local ``## Comments`` section is pushed back as
        plain blocks (divider, heading, quotes).  Remote comments are never
        recreated from it.
    debug_dump_payload:
        Write the (redacted) request/response payloads to *stderr*.
    """

    # ── Core ────────────────────────────────────────────────────────────
    token: str = ""

    notion_version: str = "2022-06-28"

    base_url: str = "https://api.notion.com/v1"

    # ── Retry & rate ────────────────────────────────────────────────────
    retry_max_attempts: int = 5

    retry_base_delay: float = 1.0

    retry_max_delay: float = 60.0

    retry_jitter: bool = True

    rate_limit_rps: float = 3.0

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    # ── Push ────────────────────────────────────────────────────────────
    append_batch_size: int = 100

    append_delay_seconds: float = 0.1

    restore_mode: Literal["unarchive", "reparent"] = "unarchive"

    push_comment_section: bool = False

    # ── Pull ────────────────────────────────────────────────────────────
    default_output_dir: str = "/tmp/notion"

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Reject values the client cannot work with."""
        from urllib.parse import urlparse

        parsed = urlparse(self.base_url)
        if parsed.scheme == "http" and parsed.hostname not in (
            "localhost",
            "127.0.0.1",
            "::1",
        ):
            raise ValueError(
                f"base_url uses insecure HTTP for non-local host '{parsed.hostname}'. "
                "The token would travel in clear text; use HTTPS or a localhost URL."
            )

        if self.retry_max_attempts < 1:
            raise ValueError(f"retry_max_attempts must be >= 1, got {self.retry_max_attempts}")
        if self.retry_base_delay < 0:
            raise ValueError(f"retry_base_delay must be >= 0, got {self.retry_base_delay}")
        if self.retry_max_delay < 0:
            raise ValueError(f"retry_max_delay must be >= 0, got {self.retry_max_delay}")
        if self.rate_limit_rps <= 0:
            raise ValueError(f"rate_limit_rps must be > 0, got {self.rate_limit_rps}")
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        if not 1 <= self.append_batch_size <= 100:
            raise ValueError(
                f"append_batch_size must be between 1 and 100, got {self.append_batch_size}"
            )
        if self.append_delay_seconds < 0:
            raise ValueError(
                f"append_delay_seconds must be >= 0, got {self.append_delay_seconds}"
            )
        if self.restore_mode not in ("unarchive", "reparent"):
            raise ValueError(
                f"restore_mode must be 'unarchive' or 'reparent', got {self.restore_mode!r}"
            )

    def __repr__(self) -> str:
        """Show only the last four characters of the token."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name == "token":
                masked = f"...{val[-4:]}" if len(val) >= 4 else "****"
                parts.append(f"token='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"NotionSyncConfig({', '.join(parts)})"


# ---------------------------------------------------------------------------
# Credential loading
# ---------------------------------------------------------------------------

def _read_env_file(path: Path, key: str) -> str:
    """Return the value of *key* in a ``KEY=value`` file, or ``""``."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        return ""
    prefix = key + "="
    for line in text.splitlines():
        line = line.strip()
        if line.startswith(prefix):
            return line[len(prefix):].strip("\"'")
    return ""


def load_token(env_file: str | Path = ".env") -> str:
    """Resolve the Notion token from ``NOTION_API_KEY`` or *env_file*.

    The environment wins over the file.

    Raises
    ------
    NotionSyncConfigError
        If neither source provides a non-empty token.
    """
    token = os.environ.get(TOKEN_ENV_VAR, "")
    if not token:
        token = _read_env_file(Path(env_file), TOKEN_ENV_VAR)
    if not token:
        raise NotionSyncConfigError(
            message=f"{TOKEN_ENV_VAR} not found in environment or {env_file} file",
            context={"env_var": TOKEN_ENV_VAR, "env_file": str(env_file)},
        )
    return token
