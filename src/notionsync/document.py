"""The on-disk form of a synced page.

A document file looks like this::

    ---
    notion_id: 1f2e3d4c5b6a79801a2b3c4d5e6f7a8b
    title: Weekly notes
    pulled_at: '2026-01-05T09:30:00+00:00'
    child_pages:
      - 0a1b2c3d4e5f60718293a4b5c6d7e8f9
    ---

    <body markup>

    ---

    ## Comments

    > **Ada** *(Jan 5, 2026)*: Looks good.

The header is YAML.  The comments section is optional and always last.
Everything here is pure string processing; reading and writing files is
left to the client.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime
from typing import Any

import yaml

from notionsync.converter.blocks import decode_blocks, encode_blocks
from notionsync.converter.remote import parse_timestamp
from notionsync.models import Comment, Document
from notionsync.utils.ids import normalize_id

COMMENTS_HEADING = "## Comments"

_HEADER_RE = re.compile(r"\A---[ \t]*\n(.*?)\n---[ \t]*(?:\n|\Z)", re.DOTALL)
_SECTION_RE = re.compile(r"(?:\n---[ \t]*\n\s*)?(?:^|\n)## Comments[ \t]*(?:\n|\Z)")
_COMMENT_RE = re.compile(r"^> \*\*(.*?)\*\* \*\((.*?)\)\*: ?(.*)$")
_UNSAFE_FILENAME_RE = re.compile(r'[<>:"/\\|?*]')

MAX_FILENAME_LENGTH = 100
COMMENT_DATE_FORMAT = "%b %d, %Y"


class _HeaderDumper(yaml.SafeDumper):
    """Indent block sequences under their key (``  - id``)."""

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> None:
        return super().increase_indent(flow, False)


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------

def _scan_header(raw: str) -> dict[str, Any]:
    """Read a header that is not valid YAML, one ``key: value`` per line."""
    meta: dict[str, Any] = {}
    current_list: list[str] | None = None
    for line in raw.splitlines():
        stripped = line.strip()
        if current_list is not None and stripped.startswith("- "):
            current_list.append(stripped[2:].strip())
            continue
        key, sep, value = line.partition(":")
        if not sep or line.startswith((" ", "\t")):
            continue
        value = value.strip()
        if value:
            meta[key.strip()] = value.strip("'\"")
            current_list = None
        else:
            current_list = meta.setdefault(key.strip(), [])
    return meta


def split_header(text: str) -> tuple[dict[str, Any], str]:
    """Split *text* into header fields and body.

    Without a header the fields are empty and the body is *text*.  All
    scalar values are returned as strings.
    """
    match = _HEADER_RE.match(text)
    if match is None:
        return {}, text
    raw = match.group(1)
    try:
        meta = yaml.load(raw, Loader=yaml.BaseLoader)
    except yaml.YAMLError:
        meta = _scan_header(raw)
    if not isinstance(meta, dict):
        meta = {}
    return meta, text[match.end():].lstrip("\n")


def render_header(document: Document) -> str:
    """Render the YAML header of *document*, delimiters included."""
    meta: dict[str, Any] = {"notion_id": document.remote_id, "title": document.title}
    if document.pulled_at is not None:
        meta["pulled_at"] = document.pulled_at.isoformat(timespec="seconds")
    if document.child_page_ids:
        meta["child_pages"] = list(document.child_page_ids)
    body = yaml.dump(
        meta,
        Dumper=_HeaderDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=10_000,
    )
    return f"---\n{body}---\n"


# ---------------------------------------------------------------------------
# Comments section
# ---------------------------------------------------------------------------

def format_comment(comment: Comment) -> str:
    """``> **Author** *(Jan 2, 2006)*: body`` on a single line."""
    date = f"{comment.created_at:%b} {comment.created_at.day}, {comment.created_at.year}"
    body = " ".join(comment.body.split("\n"))
    return f"> **{comment.author}** *({date})*: {body}"


def parse_comment_line(line: str) -> Comment | None:
    """Read one line written by :func:`format_comment`; ``None`` if it is not one."""
    match = _COMMENT_RE.match(line.strip())
    if match is None:
        return None
    try:
        created = datetime.strptime(match.group(2), COMMENT_DATE_FORMAT)
    except ValueError:
        return None
    return Comment(author=match.group(1), created_at=created, body=match.group(3))


def extract_comment_section(body: str) -> tuple[str, str]:
    """Split *body* into content and the text of its comments section.

    The section starts at the last ``## Comments`` heading, together with
    a ``---`` divider directly above it.  Without one, the section text is
    empty and the content is *body* unchanged.
    """
    matches = list(_SECTION_RE.finditer(body))
    if not matches:
        return body, ""
    last = matches[-1]
    return body[: last.start()].strip("\n"), body[last.end():].strip()


def attach_comment_section(body: str, comments: Iterable[Comment]) -> str:
    """Append a comments section listing *comments* to *body*."""
    lines = [format_comment(comment) for comment in comments]
    if not lines:
        return body
    section = "\n\n".join(lines)
    body = body.rstrip("\n")
    return f"{body}\n\n---\n\n{COMMENTS_HEADING}\n\n{section}\n"


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

def parse_document(text: str) -> Document:
    """Parse a document file.

    Never raises.  A file without a ``notion_id`` parses to a document
    whose ``remote_id`` is empty; callers that need one must check.
    """
    meta, body = split_header(text)
    content, section = extract_comment_section(body)

    children = meta.get("child_pages") or []
    if not isinstance(children, list):
        children = []
    pulled_at = meta.get("pulled_at")

    comments = [
        comment
        for comment in (parse_comment_line(line) for line in section.splitlines())
        if comment is not None
    ]
    return Document(
        remote_id=normalize_id(str(meta.get("notion_id") or "")),
        title=str(meta.get("title") or ""),
        pulled_at=parse_timestamp(pulled_at) if isinstance(pulled_at, str) else None,
        child_page_ids=[normalize_id(str(child)) for child in children if child],
        blocks=decode_blocks(content),
        comments=comments,
    )


def render_document(document: Document, trailing_ids: Iterable[str] = ()) -> str:
    """Render *document* as file text.

    Anchors of trailing child pages are left out of the body.
    """
    body = encode_blocks(document.blocks, trailing_ids)
    body = attach_comment_section(body, document.comments).rstrip("\n")
    return f"{render_header(document)}\n{body}\n"


def sanitize_filename(title: str) -> str:
    """Make *title* safe as a file name stem.

    Replaces ``<>:"/\\|?*`` with ``_`` and keeps the first 100 characters.
    """
    return _UNSAFE_FILENAME_RE.sub("_", title)[:MAX_FILENAME_LENGTH]
