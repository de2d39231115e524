"""notionsync: keep local Markdown files and Notion pages in sync.

Public re-exports
-----------------

* **Client:** :class:`NotionSyncClient`
* **Configuration:** :class:`NotionSyncConfig`, :func:`load_token`
* **Errors:** Every :class:`NotionSyncError` subclass and :class:`ErrorCode`
* **Models:** Block variants, the document value and all result types

Usage::

    from notionsync import NotionSyncClient

    client = NotionSyncClient(token="secret_xxx")
    pulled = client.pull("<page_id>", "notes")
    result = client.push(pulled.file_path)
    print(result.strategy_used, result.fallback_reason)
"""

from __future__ import annotations

# ── Client ──────────────────────────────────────────────────────────────
from notionsync.client import NotionSyncClient

# ── Configuration ───────────────────────────────────────────────────────
from notionsync.config import TOKEN_ENV_VAR, NotionSyncConfig, load_token

# ── Errors ──────────────────────────────────────────────────────────────
from notionsync.errors import (
    ErrorCode,
    NotionSyncAuthError,
    NotionSyncConfigError,
    NotionSyncConflictError,
    NotionSyncError,
    NotionSyncIdentityError,
    NotionSyncNetworkError,
    NotionSyncNotFoundError,
    NotionSyncPermissionError,
    NotionSyncRateLimitError,
    NotionSyncRetryExhaustedError,
    NotionSyncStepError,
    NotionSyncValidationError,
)

# ── Models ──────────────────────────────────────────────────────────────
from notionsync.models import (
    Block,
    BulletItem,
    Checkbox,
    ChildPageAnchor,
    CodeBlock,
    Comment,
    DiffResult,
    Divider,
    Document,
    FullReplace,
    Heading,
    NumberedItem,
    Paragraph,
    PreservePositions,
    PullResult,
    PushResult,
    QueryResult,
    Quote,
    SchemaProperty,
    Section,
    StrategyType,
    SyncWarning,
    Table,
    TextSpan,
)

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Client
    "NotionSyncClient",
    # Configuration
    "NotionSyncConfig",
    "TOKEN_ENV_VAR",
    "load_token",
    # Error base + code enum
    "NotionSyncError",
    "ErrorCode",
    # API / transport errors
    "NotionSyncValidationError",
    "NotionSyncAuthError",
    "NotionSyncPermissionError",
    "NotionSyncNotFoundError",
    "NotionSyncConflictError",
    "NotionSyncRateLimitError",
    "NotionSyncRetryExhaustedError",
    "NotionSyncNetworkError",
    # Sync errors
    "NotionSyncIdentityError",
    "NotionSyncStepError",
    "NotionSyncConfigError",
    # Models: blocks
    "Block",
    "TextSpan",
    "Heading",
    "Paragraph",
    "BulletItem",
    "NumberedItem",
    "Checkbox",
    "Quote",
    "CodeBlock",
    "Divider",
    "Table",
    "ChildPageAnchor",
    # Models: documents
    "Comment",
    "Document",
    # Models: push plans
    "StrategyType",
    "Section",
    "FullReplace",
    "PreservePositions",
    # Models: results
    "SyncWarning",
    "PullResult",
    "PushResult",
    "DiffResult",
    "SchemaProperty",
    "QueryResult",
]
