"""Data models for notionsync.

This module holds the typed block tree the codecs produce and consume, the
document value persisted to disk, the push plans chosen by the
reconciliation planner, and every result type returned by the client.

Block variants are frozen dataclasses so that two decodes of the same text
compare equal.  Remote payloads never travel past
:mod:`notionsync.converter.remote`; everything downstream works on these
types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union

# ---------------------------------------------------------------------------
# Inline spans
# ---------------------------------------------------------------------------

BOLD = "bold"
ITALIC = "italic"
CODE = "code"
STRIKETHROUGH = "strikethrough"

ANNOTATIONS: frozenset[str] = frozenset({BOLD, ITALIC, CODE, STRIKETHROUGH})
"""Annotations a :class:`TextSpan` may carry."""


@dataclass(frozen=True)
class TextSpan:
    """A run of text with uniform formatting, or a page mention.

    Attributes
    ----------
    content:
        The literal text.  For mentions, the title of the mentioned page.
    annotations:
        Subset of :data:`ANNOTATIONS`.
    link:
        Target URL when the run is a hyperlink.
    mention:
        Page id when the span mentions a page.  Mutually exclusive with
        *link*.
    """

    content: str
    annotations: frozenset[str] = frozenset()
    link: str | None = None
    mention: str | None = None

    def __post_init__(self) -> None:
        if self.link is not None and self.mention is not None:
            raise ValueError("a span cannot carry both a link and a mention")
        unknown = self.annotations - ANNOTATIONS
        if unknown:
            raise ValueError(f"unknown annotations: {sorted(unknown)}")

    def same_format(self, other: TextSpan) -> bool:
        """Return ``True`` if *other* differs from this span only in content."""
        return (
            self.annotations == other.annotations
            and self.link == other.link
            and self.mention is None
            and other.mention is None
        )


Spans = tuple[TextSpan, ...]


def plain_text(spans: Spans) -> str:
    """Concatenate the literal content of *spans*."""
    return "".join(span.content for span in spans)


# ---------------------------------------------------------------------------
# Block variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Heading:
    level: int
    spans: Spans = ()

    def __post_init__(self) -> None:
        if self.level not in (1, 2, 3):
            raise ValueError(f"heading level must be 1..3, got {self.level}")


@dataclass(frozen=True)
class Paragraph:
    spans: Spans = ()


@dataclass(frozen=True)
class BulletItem:
    spans: Spans = ()


@dataclass(frozen=True)
class NumberedItem:
    """A numbered list item.

    ``ordinal`` restarts at 1 whenever the previous block is not a
    :class:`NumberedItem`; the codecs recompute it from position.
    """

    spans: Spans = ()
    ordinal: int = 1


@dataclass(frozen=True)
class Checkbox:
    spans: Spans = ()
    checked: bool = False


@dataclass(frozen=True)
class Quote:
    spans: Spans = ()


@dataclass(frozen=True)
class CodeBlock:
    text: str = ""
    language: str = ""


@dataclass(frozen=True)
class Divider:
    pass


@dataclass(frozen=True)
class Table:
    """A table of span cells.

    Every row has the same number of cells; the first row is a header
    when *has_header_row* is set.
    """

    rows: tuple[tuple[Spans, ...], ...]
    has_header_row: bool = True

    def __post_init__(self) -> None:
        if not self.rows:
            raise ValueError("a table needs at least one row")
        width = len(self.rows[0])
        if any(len(row) != width for row in self.rows):
            raise ValueError("all table rows must have the same column count")

    @property
    def width(self) -> int:
        return len(self.rows[0])


@dataclass(frozen=True)
class ChildPageAnchor:
    """Position marker for a child page living under the synced page.

    Attributes
    ----------
    page_id:
        Normalised id of the child page.
    title:
        Title shown in the marker line.  Informational only.
    trailing:
        ``True`` when the child page sits after the last ordinary block of
        the remote page; such anchors are not written to the markup.
    """

    page_id: str
    title: str = ""
    trailing: bool = False


Block = Union[
    Heading,
    Paragraph,
    BulletItem,
    NumberedItem,
    Checkbox,
    Quote,
    CodeBlock,
    Divider,
    Table,
    ChildPageAnchor,
]

LIST_BLOCKS: tuple[type, ...] = (BulletItem, NumberedItem, Checkbox)
"""Block types written on consecutive lines without blank separators."""


# ---------------------------------------------------------------------------
# Comments and documents
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Comment:
    """A Notion comment, rendered locally as an attributed quote.

    Attributes
    ----------
    author:
        Display name, ``"Unknown"`` when it could not be resolved.
    created_at:
        Creation time reported by Notion.
    body:
        Plain text of the comment.
    block_index:
        Index of the top-level block the comment is attached to, or
        ``None`` for page-level comments.
    """

    author: str
    created_at: datetime
    body: str
    block_index: int | None = None


@dataclass
class Document:
    """A Notion page as persisted in a local Markdown file.

    Attributes
    ----------
    remote_id:
        Page id with dashes stripped.  Empty when the file has no header.
    title:
        Page title at pull time.
    pulled_at:
        When the page was pulled, or ``None`` if unknown.
    child_page_ids:
        Every child page seen at pull time, in remote order.
    blocks:
        Body content.
    comments:
        Comments shown in the trailing ``## Comments`` section.
    """

    remote_id: str
    title: str = ""
    pulled_at: datetime | None = None
    child_page_ids: list[str] = field(default_factory=list)
    blocks: list[Block] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Push plans
# ---------------------------------------------------------------------------

class StrategyType(str, Enum):
    """Push strategies chosen by :func:`notionsync.reconcile.plan_push`."""

    FULL_REPLACE = "full_replace"
    """Erase the page, append everything, restore child pages at the end."""

    PRESERVE_POSITIONS = "preserve_positions"
    """Edit around the child pages so they keep their positions."""


@dataclass
class Section:
    """A run of blocks inserted after one anchor point.

    Attributes
    ----------
    after_id:
        Id of the child page the blocks follow, or ``None`` for the leading
        section, which follows the placeholder block.
    blocks:
        Blocks to insert, in order.
    """

    after_id: str | None
    blocks: list[Block] = field(default_factory=list)


@dataclass
class FullReplace:
    """Plan: erase, append *blocks*, restore *restore_ids*.

    Attributes
    ----------
    blocks:
        Blocks to append (anchors removed, warning paragraphs inserted).
    restore_ids:
        Child pages to bring back after the erase, nested ones included.
    reason:
        Why this strategy was picked (``no_child_pages``,
        ``no_anchor_markers``, ``no_placeholder_block``,
        ``leading_child_page_moved``, ``child_pages_reordered``).
    warnings:
        Human-readable notes about content that will move.
    reparent_ids:
        The subset of *restore_ids* that sat inside another block.  They
        are always moved back under the page rather than unarchived, since
        their old parent block is gone.
    """

    blocks: list[Block]
    restore_ids: list[str] = field(default_factory=list)
    reason: str = ""
    warnings: list[SyncWarning] = field(default_factory=list)
    reparent_ids: list[str] = field(default_factory=list)

    strategy = StrategyType.FULL_REPLACE

    @property
    def is_fallback(self) -> bool:
        """``True`` when position preservation was possible in principle
        but had to be abandoned."""
        return self.reason in (
            "no_placeholder_block",
            "leading_child_page_moved",
            "child_pages_reordered",
        )


@dataclass
class PreservePositions:
    """Plan: splice new content around the existing child pages.

    Attributes
    ----------
    anchor_id:
        Id of the block blanked into a placeholder.
    anchor_type:
        Notion type of that block, needed to build the blanking payload.
    sections:
        Content runs in insertion order.
    delete_ids:
        Every other non-child block currently on the page.
    reparent_ids:
        Child pages nested inside deleted blocks; moved back under the page
        once the edit is done.
    warnings:
        Notes about those nested pages, which end up at the bottom.
    """

    anchor_id: str
    anchor_type: str
    sections: list[Section] = field(default_factory=list)
    delete_ids: list[str] = field(default_factory=list)
    reparent_ids: list[str] = field(default_factory=list)
    warnings: list[SyncWarning] = field(default_factory=list)

    strategy = StrategyType.PRESERVE_POSITIONS


PushPlan = Union[FullReplace, PreservePositions]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class SyncWarning:
    """A non-fatal issue surfaced to the caller.

    Attributes
    ----------
    code:
        Machine-readable code (e.g. ``"CHILD_PAGE_MOVED"``).
    message:
        Human-readable description.
    context:
        Structured diagnostics.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class PullResult:
    """Result of :meth:`NotionSyncClient.pull`."""

    document: Document
    file_path: str
    markdown: str

    @property
    def page_id(self) -> str:
        return self.document.remote_id

    @property
    def title(self) -> str:
        return self.document.title


@dataclass
class PushResult:
    """Result of :meth:`NotionSyncClient.push`.

    Attributes
    ----------
    page_id:
        The page that was written.
    strategy_used:
        The strategy actually executed.
    fallback_reason:
        Set when a position-preserving push degraded to a full replace.
    blocks_written:
        Blocks appended or inserted.
    blocks_deleted:
        Existing blocks removed one by one (position-preserving only).
    child_pages_restored:
        Child pages brought back after an erase.
    warnings:
        Non-fatal notes, e.g. child pages that moved.
    """

    page_id: str
    strategy_used: StrategyType
    fallback_reason: str | None = None
    blocks_written: int = 0
    blocks_deleted: int = 0
    child_pages_restored: int = 0
    warnings: list[SyncWarning] = field(default_factory=list)


@dataclass
class DiffResult:
    """Result of :meth:`NotionSyncClient.diff`.

    Attributes
    ----------
    page_id:
        The compared page.
    lines:
        Report lines (``-`` remote, ``+`` local), empty when unchanged.
    text:
        Rendered report, or the no-changes sentinel.
    """

    page_id: str
    lines: list[str] = field(default_factory=list)
    text: str = ""

    @property
    def has_changes(self) -> bool:
        return bool(self.lines)


@dataclass(frozen=True)
class SchemaProperty:
    """Name and type of one database property."""

    name: str
    type: str


@dataclass
class QueryResult:
    """Flattened rows of a database query."""

    results: list[dict[str, Any]] = field(default_factory=list)
    has_more: bool = False
    next_cursor: str | None = None
