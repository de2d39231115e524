"""Map raw Notion records to :class:`Block` and :class:`Comment` values.

Block records come from :meth:`BlockAPI.get_tree`, so nested children sit
under :data:`~notionsync.notion_api.blocks.CHILDREN_KEY`.  Each Notion
type has one mapper in :data:`_MAPPERS`.  Nested content is flattened:
the children of a list item, quote, callout or toggle follow their parent
at the top level.

Unknown types become a paragraph when they carry text and are dropped
otherwise.  Embedded media and databases have no Markdown form.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from notionsync.models import (
    Block,
    BulletItem,
    Checkbox,
    ChildPageAnchor,
    CodeBlock,
    Comment,
    Divider,
    Heading,
    NumberedItem,
    Paragraph,
    Quote,
    Table,
)
from notionsync.notion_api.blocks import CHILDREN_KEY
from notionsync.observability import get_logger, log_event
from notionsync.utils.ids import normalize_id

from .blocks import renumber
from .payload import PLAIN_TEXT
from .rich_text import rich_text_plain, rich_text_to_spans

log = get_logger("notionsync.converter")

CHILD_PAGE = "child_page"

Record = dict[str, Any]
BlockMapper = Callable[[Record, "frozenset[str]"], "list[Block]"]


def _body(record: Record) -> dict[str, Any]:
    return record.get(record.get("type", ""), {}) or {}


def _children(record: Record, trailing: frozenset[str]) -> list[Block]:
    return _map_records(record.get(CHILDREN_KEY, []), trailing)


# ---------------------------------------------------------------------------
# Per-type mappers
# ---------------------------------------------------------------------------

def _text_mapper(factory: Callable[[Any], Block]) -> BlockMapper:
    """Mapper for blocks made of one ``rich_text`` plus flattened children."""

    def mapper(record: Record, trailing: frozenset[str]) -> list[Block]:
        block = factory(rich_text_to_spans(_body(record).get("rich_text")))
        return [block, *_children(record, trailing)]

    return mapper


def _heading(level: int) -> BlockMapper:
    return _text_mapper(lambda spans: Heading(level, spans))


def _to_do(record: Record, trailing: frozenset[str]) -> list[Block]:
    body = _body(record)
    block = Checkbox(rich_text_to_spans(body.get("rich_text")), bool(body.get("checked")))
    return [block, *_children(record, trailing)]


def _code(record: Record, trailing: frozenset[str]) -> list[Block]:
    body = _body(record)
    language = body.get("language") or ""
    if language == PLAIN_TEXT:
        language = ""
    return [CodeBlock(rich_text_plain(body.get("rich_text")), language)]


def _divider(record: Record, trailing: frozenset[str]) -> list[Block]:
    return [Divider()]


def _table(record: Record, trailing: frozenset[str]) -> list[Block]:
    body = _body(record)
    rows = [
        [rich_text_to_spans(cell) for cell in (row.get("table_row") or {}).get("cells", [])]
        for row in record.get(CHILDREN_KEY, [])
        if row.get("type") == "table_row"
    ]
    if not rows:
        return []
    width = body.get("table_width") or max(len(row) for row in rows)
    fitted = tuple(tuple((row + [()] * width)[:width]) for row in rows)
    return [Table(fitted, bool(body.get("has_column_header")))]


def _child_page(record: Record, trailing: frozenset[str]) -> list[Block]:
    page_id = normalize_id(record.get("id", ""))
    title = _body(record).get("title", "")
    return [ChildPageAnchor(page_id, title, page_id in trailing)]


_MAPPERS: dict[str, BlockMapper] = {
    "heading_1": _heading(1),
    "heading_2": _heading(2),
    "heading_3": _heading(3),
    "paragraph": _text_mapper(Paragraph),
    "bulleted_list_item": _text_mapper(BulletItem),
    "numbered_list_item": _text_mapper(NumberedItem),
    "to_do": _to_do,
    "quote": _text_mapper(Quote),
    "callout": _text_mapper(Quote),
    "toggle": _text_mapper(Paragraph),
    "code": _code,
    "divider": _divider,
    "table": _table,
    CHILD_PAGE: _child_page,
}


def _fallback(record: Record, trailing: frozenset[str]) -> list[Block]:
    spans = rich_text_to_spans(_body(record).get("rich_text"))
    if not spans:
        log_event(log, logging.DEBUG, "block_dropped", block_type=record.get("type"))
        return []
    return [Paragraph(spans), *_children(record, trailing)]


def _map_records(records: Iterable[Record], trailing: frozenset[str]) -> list[Block]:
    blocks: list[Block] = []
    for record in records:
        mapper = _MAPPERS.get(record.get("type", ""), _fallback)
        blocks.extend(mapper(record, trailing))
    return blocks


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def blocks_from_remote(records: list[Record], trailing_ids: Iterable[str] = ()) -> list[Block]:
    """Convert a fetched block tree into a flat block list.

    Parameters
    ----------
    records:
        Top-level children of a page, with nested children expanded.
    trailing_ids:
        Child pages to flag as trailing (see :func:`classify_trailing`).

    Returns
    -------
    list[Block]
        Blocks in document order, numbered items renumbered.
    """
    trailing = frozenset(normalize_id(page_id) for page_id in trailing_ids)
    return renumber(_map_records(records, trailing))


def child_pages(records: list[Record], nested: bool = False) -> list[tuple[str, str]]:
    """``(id, title)`` of the child pages in *records*, in document order.

    Only top-level child pages are listed unless *nested* is set, in which
    case pages found under other blocks (toggles, list items) follow the
    walk of the tree.
    """
    pages: list[tuple[str, str]] = []
    for record in records:
        if record.get("type") == CHILD_PAGE:
            pages.append((normalize_id(record.get("id", "")), _body(record).get("title", "")))
        elif nested:
            pages.extend(child_pages(record.get(CHILDREN_KEY, []), nested=True))
    return pages


def nested_child_pages(records: list[Record]) -> list[tuple[str, str]]:
    """``(id, title)`` of the child pages that live inside another block."""
    return [
        page
        for record in records
        if record.get("type") != CHILD_PAGE
        for page in child_pages(record.get(CHILDREN_KEY, []), nested=True)
    ]


def classify_trailing(records: list[Record]) -> list[str]:
    """Ids of the child pages that come after the last other block.

    With no other block at all, every child page is trailing.
    """
    last_content = -1
    for index, record in enumerate(records):
        if record.get("type") != CHILD_PAGE:
            last_content = index
    return [
        normalize_id(record.get("id", ""))
        for record in records[last_content + 1 :]
        if record.get("type") == CHILD_PAGE
    ]


def parse_timestamp(value: str) -> datetime | None:
    """Parse a Notion ISO-8601 timestamp, ``None`` if malformed."""
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None


def comments_from_remote(
    records: list[Record],
    resolve_name: Callable[[str], str],
    block_ids: list[str] | None = None,
) -> list[Comment]:
    """Convert comment records to :class:`Comment` values.

    Parameters
    ----------
    records:
        Results of ``GET /comments``.
    resolve_name:
        Returns the display name for a user id; used when the record does
        not carry the author's name.
    block_ids:
        Ids of the page's top-level blocks.  A comment on one of them gets
        that block's index.

    Returns
    -------
    list[Comment]
        Comments in the order received.  Records with an unreadable
        ``created_time`` are skipped.
    """
    positions = {normalize_id(block_id): i for i, block_id in enumerate(block_ids or [])}
    comments: list[Comment] = []
    for record in records:
        created = parse_timestamp(record.get("created_time", ""))
        if created is None:
            log_event(log, logging.DEBUG, "comment_skipped", comment_id=record.get("id"))
            continue
        author = record.get("created_by") or {}
        name = author.get("name") or resolve_name(author.get("id", ""))
        parent = record.get("parent") or {}
        block_index = None
        if parent.get("type") == "block_id":
            block_index = positions.get(normalize_id(parent.get("block_id", "")))
        comments.append(
            Comment(
                author=name,
                created_at=created,
                body=rich_text_plain(record.get("rich_text")),
                block_index=block_index,
            )
        )
    return comments
