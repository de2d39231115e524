"""Markdown lines <-> :class:`Block` lists.

Decoding is a greedy line classifier, not a grammar.  Each non-empty line
is tested against :data:`LINE_RULES` in order and the first matching rule
produces the block.  Fenced code and tables are the only rules that
consume more than one line.  Adding a block type means adding one rule.

Encoding is the inverse: one blank line between blocks, except between
neighbouring list items (bullets, numbered items, checkboxes), which sit
on consecutive lines.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

from notionsync.models import (
    LIST_BLOCKS,
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
    Spans,
    Table,
)
from notionsync.utils.ids import normalize_id

from .inline import decode_inline, encode_inline

ANCHOR_PREFIX = "<!-- child_page: "
ANCHOR_SUFFIX = " -->"
FENCE = "```"

_SEPARATOR_CELL_RE = re.compile(r"^:?-+:?$")

# A rule handler gets the match, all lines and the current index, and
# returns the decoded blocks plus the index of the next unread line.
RuleHandler = Callable[[re.Match, list[str], int], "tuple[list[Block], int]"]


def _spans(text: str) -> Spans:
    return tuple(decode_inline(text))


# ---------------------------------------------------------------------------
# Line rules
# ---------------------------------------------------------------------------

def _heading(match: re.Match, lines: list[str], i: int) -> tuple[list[Block], int]:
    return [Heading(len(match.group(1)), _spans(match.group(2)))], i + 1


def _divider(match: re.Match, lines: list[str], i: int) -> tuple[list[Block], int]:
    return [Divider()], i + 1


def _fence(match: re.Match, lines: list[str], i: int) -> tuple[list[Block], int]:
    language = match.group(1).strip()
    body: list[str] = []
    j = i + 1
    while j < len(lines) and not lines[j].startswith(FENCE):
        body.append(lines[j])
        j += 1
    # An unterminated fence runs to the end of the input.
    return [CodeBlock("\n".join(body), language)], j + 1


def _checkbox(match: re.Match, lines: list[str], i: int) -> tuple[list[Block], int]:
    checked = match.group(1) in "xX"
    return [Checkbox(_spans(match.group(2) or ""), checked)], i + 1


def _bullet(match: re.Match, lines: list[str], i: int) -> tuple[list[Block], int]:
    return [BulletItem(_spans(match.group(1)))], i + 1


def _numbered(match: re.Match, lines: list[str], i: int) -> tuple[list[Block], int]:
    # Ordinals are positional; the written number is ignored.
    return [NumberedItem(_spans(match.group(1)))], i + 1


def _quote(match: re.Match, lines: list[str], i: int) -> tuple[list[Block], int]:
    return [Quote(_spans(match.group(1)))], i + 1


def split_cells(line: str) -> list[str]:
    """Split a ``| a | b |`` row into stripped cell texts."""
    inner = line.strip()
    if inner.startswith("|"):
        inner = inner[1:]
    if inner.endswith("|"):
        inner = inner[:-1]
    return [cell.strip() for cell in inner.split("|")]


def is_separator_row(cells: list[str]) -> bool:
    return all(_SEPARATOR_CELL_RE.match(cell) for cell in cells)


def _table(match: re.Match, lines: list[str], i: int) -> tuple[list[Block], int]:
    j = i
    while j < len(lines) and lines[j].lstrip().startswith("|"):
        j += 1
    raw = lines[i:j]

    rows: list[list[str]] = []
    has_header_row = False
    for index, line in enumerate(raw):
        cells = split_cells(line)
        if is_separator_row(cells):
            if index == 1 and len(rows) == 1:
                has_header_row = True
            continue
        rows.append(cells)

    if not rows:
        return [Paragraph(_spans(line)) for line in raw], j

    width = len(rows[0])
    fitted = tuple(
        tuple(_spans(cell) for cell in (row + [""] * width)[:width]) for row in rows
    )
    return [Table(fitted, has_header_row)], j


def _anchor(match: re.Match, lines: list[str], i: int) -> tuple[list[Block], int]:
    return [ChildPageAnchor(normalize_id(match.group(1)), match.group(2) or "")], i + 1


def _paragraph(match: re.Match, lines: list[str], i: int) -> tuple[list[Block], int]:
    return [Paragraph(_spans(lines[i]))], i + 1


LINE_RULES: tuple[tuple[re.Pattern, RuleHandler], ...] = (
    (re.compile(r"^(#{1,3}) (.*)$"), _heading),
    (re.compile(r"^---$"), _divider),
    (re.compile(r"^```(.*)$"), _fence),
    (re.compile(r"^- \[([ xX])\](?: (.*))?$"), _checkbox),
    (re.compile(r"^- (.*)$"), _bullet),
    (re.compile(r"^\d+\. (.*)$"), _numbered),
    (re.compile(r"^> (.*)$"), _quote),
    (re.compile(r"^\s*\|"), _table),
    (re.compile(r"^<!-- child_page: (\S+?)(?: \| (.*?))? -->$"), _anchor),
    (re.compile(r""), _paragraph),
)
"""Ordered ``(pattern, handler)`` pairs; the first match wins."""


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def renumber(blocks: Iterable[Block]) -> list[Block]:
    """Give every :class:`NumberedItem` its positional ordinal.

    A run of numbered items counts 1, 2, 3...; any other block ends the run.
    """
    result: list[Block] = []
    for block in blocks:
        if isinstance(block, NumberedItem):
            prev = result[-1] if result else None
            ordinal = prev.ordinal + 1 if isinstance(prev, NumberedItem) else 1
            if block.ordinal != ordinal:
                block = NumberedItem(block.spans, ordinal)
        result.append(block)
    return result


def decode_blocks(text: str) -> list[Block]:
    """Parse Markdown *text* into blocks.

    Blank lines separate nothing and are dropped, except inside fenced
    code.  Never raises; anything unrecognised becomes a paragraph.
    """
    lines = [line.rstrip("\r") for line in text.split("\n")]
    blocks: list[Block] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if not line.strip():
            i += 1
            continue
        for pattern, handler in LINE_RULES:
            match = pattern.match(line)
            if match is not None:
                produced, i = handler(match, lines, i)
                blocks.extend(produced)
                break
    return renumber(blocks)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def _table_row(cells: Iterable[Spans]) -> str:
    return "| " + " | ".join(encode_inline(cell) for cell in cells) + " |"


def encode_block(block: Block, ordinal: int = 1) -> str:
    """Render one block; *ordinal* is used for numbered items."""
    if isinstance(block, Heading):
        return "#" * block.level + " " + encode_inline(block.spans)
    if isinstance(block, Paragraph):
        return encode_inline(block.spans)
    if isinstance(block, BulletItem):
        return "- " + encode_inline(block.spans)
    if isinstance(block, NumberedItem):
        return f"{ordinal}. " + encode_inline(block.spans)
    if isinstance(block, Checkbox):
        mark = "x" if block.checked else " "
        text = encode_inline(block.spans)
        return f"- [{mark}] {text}" if text else f"- [{mark}]"
    if isinstance(block, Quote):
        return "> " + encode_inline(block.spans)
    if isinstance(block, CodeBlock):
        if not block.text:
            return f"{FENCE}{block.language}\n{FENCE}"
        return f"{FENCE}{block.language}\n{block.text}\n{FENCE}"
    if isinstance(block, Divider):
        return "---"
    if isinstance(block, Table):
        lines = [_table_row(block.rows[0])]
        if block.has_header_row:
            lines.append("| " + " | ".join(["---"] * block.width) + " |")
        lines.extend(_table_row(row) for row in block.rows[1:])
        return "\n".join(lines)
    if isinstance(block, ChildPageAnchor):
        return f"{ANCHOR_PREFIX}{block.page_id} | {block.title}{ANCHOR_SUFFIX}"
    raise TypeError(f"not a block: {block!r}")


def encode_blocks(blocks: Iterable[Block], trailing_ids: Iterable[str] = ()) -> str:
    """Render *blocks* as Markdown.

    Parameters
    ----------
    blocks:
        Blocks in document order.
    trailing_ids:
        Child pages rendered nowhere.  Anchors for them, and anchors whose
        ``trailing`` flag is set, are skipped.

    Returns
    -------
    str
        The Markdown text, without a trailing newline.
    """
    skip = {normalize_id(page_id) for page_id in trailing_ids}
    visible = [
        block
        for block in blocks
        if not (
            isinstance(block, ChildPageAnchor)
            and (block.trailing or block.page_id in skip)
        )
    ]

    parts: list[str] = []
    prev: Block | None = None
    for block in renumber(visible):
        if prev is not None:
            contiguous = isinstance(prev, LIST_BLOCKS) and isinstance(block, LIST_BLOCKS)
            parts.append("\n" if contiguous else "\n\n")
        ordinal = block.ordinal if isinstance(block, NumberedItem) else 1
        parts.append(encode_block(block, ordinal))
        prev = block
    return "".join(parts)
