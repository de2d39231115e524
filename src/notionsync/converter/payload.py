"""Build Notion block payloads from :class:`Block` values.

:func:`block_to_payload` is the only place that knows the shape of a
Notion block body for writing.  Child-page anchors produce no payload:
child pages are never created from Markdown.
"""

from __future__ import annotations

import re
from typing import Any

from notionsync.models import (
    Block,
    BulletItem,
    Checkbox,
    ChildPageAnchor,
    CodeBlock,
    Divider,
    Heading,
    NumberedItem,
    Paragraph,
    Quote,
    Table,
)

from .rich_text import spans_to_rich_text, split_rich_text

PLAIN_TEXT = "plain text"

# Languages the Notion API accepts for code blocks.
NOTION_LANGUAGES: frozenset[str] = frozenset({
    "abap", "arduino", "assembly", "bash", "basic", "c", "c#", "c++",
    "clojure", "coffeescript", "css", "dart", "diff", "docker", "elixir",
    "elm", "erlang", "f#", "flow", "fortran", "gherkin", "glsl", "go",
    "graphql", "groovy", "haskell", "html", "java", "java/c/c++/c#",
    "javascript", "json", "julia", "kotlin", "latex", "less", "lisp",
    "livescript", "lua", "makefile", "markdown", "markup", "matlab",
    "mermaid", "nix", "objective-c", "ocaml", "pascal", "perl", "php",
    PLAIN_TEXT, "powershell", "prolog", "protobuf", "python", "r", "reason",
    "ruby", "rust", "sass", "scala", "scheme", "scss", "shell", "sql",
    "swift", "typescript", "vb.net", "verilog", "vhdl", "visual basic",
    "webassembly", "xml", "yaml",
})

# Common fence info strings and the Notion language they stand for.
LANGUAGE_ALIASES: dict[str, str] = {
    "plaintext": PLAIN_TEXT,
    "plain": PLAIN_TEXT,
    "text": PLAIN_TEXT,
    "txt": PLAIN_TEXT,
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "rb": "ruby",
    "rs": "rust",
    "sh": "shell",
    "zsh": "shell",
    "console": "shell",
    "yml": "yaml",
    "dockerfile": "docker",
    "md": "markdown",
    "cpp": "c++",
    "cs": "c#",
    "csharp": "c#",
    "kt": "kotlin",
    "objc": "objective-c",
    "ps1": "powershell",
    "tex": "latex",
    "proto": "protobuf",
    "wasm": "webassembly",
}


# Remote block types whose text can be blanked by a rich_text patch.
TEXT_BLOCK_TYPES: frozenset[str] = frozenset({
    "paragraph",
    "heading_1",
    "heading_2",
    "heading_3",
    "bulleted_list_item",
    "numbered_list_item",
    "to_do",
    "quote",
    "callout",
    "toggle",
    "code",
})

PLACEHOLDER_TYPES: frozenset[str] = TEXT_BLOCK_TYPES | {"divider"}
"""Remote block types that can serve as the splice point of a push."""


def notion_language(info: str) -> str:
    """Map a fence info string to a language Notion accepts.

    Unknown or empty values become ``"plain text"``.
    """
    lang = info.strip().lower()
    if not lang:
        return PLAIN_TEXT
    if lang in LANGUAGE_ALIASES:
        return LANGUAGE_ALIASES[lang]
    if lang in NOTION_LANGUAGES:
        return lang
    # python3 -> python
    stripped = re.sub(r"\d+$", "", lang)
    if stripped in NOTION_LANGUAGES:
        return stripped
    return LANGUAGE_ALIASES.get(stripped, PLAIN_TEXT)


def _wrap(block_type: str, body: dict[str, Any]) -> dict[str, Any]:
    return {"object": "block", "type": block_type, block_type: body}


def _code_rich_text(text: str) -> list[dict]:
    if not text:
        return []
    return split_rich_text([{"type": "text", "text": {"content": text}}])


def block_to_payload(block: Block) -> dict[str, Any] | None:
    """Return the Notion payload for *block*, or ``None`` for anchors."""
    if isinstance(block, Heading):
        return _wrap(f"heading_{block.level}", {"rich_text": spans_to_rich_text(block.spans)})
    if isinstance(block, Paragraph):
        return _wrap("paragraph", {"rich_text": spans_to_rich_text(block.spans)})
    if isinstance(block, BulletItem):
        return _wrap("bulleted_list_item", {"rich_text": spans_to_rich_text(block.spans)})
    if isinstance(block, NumberedItem):
        return _wrap("numbered_list_item", {"rich_text": spans_to_rich_text(block.spans)})
    if isinstance(block, Checkbox):
        return _wrap(
            "to_do",
            {"rich_text": spans_to_rich_text(block.spans), "checked": block.checked},
        )
    if isinstance(block, Quote):
        return _wrap("quote", {"rich_text": spans_to_rich_text(block.spans)})
    if isinstance(block, CodeBlock):
        return _wrap(
            "code",
            {"rich_text": _code_rich_text(block.text), "language": notion_language(block.language)},
        )
    if isinstance(block, Divider):
        return _wrap("divider", {})
    if isinstance(block, Table):
        rows = [
            {
                "object": "block",
                "type": "table_row",
                "table_row": {"cells": [spans_to_rich_text(cell) for cell in row]},
            }
            for row in block.rows
        ]
        return _wrap(
            "table",
            {
                "table_width": block.width,
                "has_column_header": block.has_header_row,
                "has_row_header": False,
                "children": rows,
            },
        )
    if isinstance(block, ChildPageAnchor):
        return None
    raise TypeError(f"not a block: {block!r}")


def blocks_to_payloads(blocks: list[Block]) -> list[dict[str, Any]]:
    """Payloads for *blocks* in order, anchors left out."""
    payloads = (block_to_payload(block) for block in blocks)
    return [payload for payload in payloads if payload is not None]


def placeholder_payload(block_type: str) -> dict[str, Any] | None:
    """Patch that empties the text of an existing block of *block_type*.

    Returns ``None`` for block types that carry no ``rich_text`` (dividers
    and similar), which are kept as they are.
    """
    if block_type in TEXT_BLOCK_TYPES:
        return {block_type: {"rich_text": []}}
    return None

