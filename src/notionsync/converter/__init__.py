"""Conversion between Markdown, :class:`Block` values and Notion payloads."""

from __future__ import annotations

from .blocks import LINE_RULES, decode_blocks, encode_block, encode_blocks, renumber
from .inline import decode_inline, encode_inline, merge_spans
from .payload import block_to_payload, blocks_to_payloads, notion_language
from .remote import (
    blocks_from_remote,
    child_pages,
    classify_trailing,
    comments_from_remote,
    nested_child_pages,
)
from .rich_text import rich_text_to_spans, spans_to_rich_text, split_rich_text

__all__ = [
    "LINE_RULES",
    "block_to_payload",
    "blocks_from_remote",
    "blocks_to_payloads",
    "child_pages",
    "classify_trailing",
    "comments_from_remote",
    "decode_blocks",
    "decode_inline",
    "encode_block",
    "encode_blocks",
    "encode_inline",
    "merge_spans",
    "nested_child_pages",
    "notion_language",
    "renumber",
    "rich_text_to_spans",
    "spans_to_rich_text",
    "split_rich_text",
]
