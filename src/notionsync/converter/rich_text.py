"""Conversion between :class:`TextSpan` lists and Notion ``rich_text`` arrays.

Written segments take one of two forms.

Text::

    {"type": "text",
     "text": {"content": "hello", "link": {"url": "https://..."}},
     "annotations": {"bold": true, ...}}

Page mention::

    {"type": "mention",
     "mention": {"type": "page", "page": {"id": "<page id>"}}}

``link`` and ``annotations`` are omitted when unused.  Underline and
colour have no Markdown form; they are read as plain text and never
written.
"""

from __future__ import annotations

from typing import Any

from notionsync.models import ANNOTATIONS, CODE, Spans, TextSpan
from notionsync.utils.ids import format_id, normalize_id
from notionsync.utils.text_split import RICH_TEXT_LIMIT, split_string

from .inline import merge_spans


# ---------------------------------------------------------------------------
# Spans -> rich_text
# ---------------------------------------------------------------------------

def _annotations_dict(annotations: frozenset[str]) -> dict[str, bool]:
    return {name: name in annotations for name in sorted(ANNOTATIONS)}


def _make_text_segment(content: str, annotations: frozenset[str], link: str | None) -> dict:
    text: dict[str, Any] = {"content": content}
    if link:
        text["link"] = {"url": link}
    segment: dict[str, Any] = {"type": "text", "text": text}
    if annotations:
        segment["annotations"] = _annotations_dict(annotations)
    return segment


def spans_to_rich_text(spans: Spans | list[TextSpan]) -> list[dict]:
    """Build a ``rich_text`` array from *spans*.

    Neighbouring spans with the same formatting are merged first and long
    contents are split by :func:`split_rich_text`.
    """
    segments: list[dict] = []
    for span in merge_spans(spans):
        if span.mention is not None:
            segment: dict[str, Any] = {
                "type": "mention",
                "mention": {"type": "page", "page": {"id": format_id(span.mention)}},
            }
            if span.annotations:
                segment["annotations"] = _annotations_dict(span.annotations)
            segments.append(segment)
        else:
            segments.append(_make_text_segment(span.content, span.annotations, span.link))
    return split_rich_text(segments)


def split_rich_text(segments: list[dict], limit: int = RICH_TEXT_LIMIT) -> list[dict]:
    """Split text segments whose content exceeds *limit* characters.

    Each piece keeps the annotations and link of its source segment.
    Mentions pass through untouched.

    Parameters
    ----------
    segments:
        A ``rich_text`` array.
    limit:
        Maximum characters per segment; Notion rejects more than 2000.

    Returns
    -------
    list[dict]
        A new array.
    """
    output: list[dict] = []
    for segment in segments:
        content = segment.get("text", {}).get("content", "")
        if segment.get("type") != "text" or len(content) <= limit:
            output.append(segment)
            continue
        for piece in split_string(content, limit):
            clone = dict(segment)
            clone["text"] = {**segment["text"], "content": piece}
            output.append(clone)
    return output


# ---------------------------------------------------------------------------
# rich_text -> spans
# ---------------------------------------------------------------------------

def _read_annotations(segment: dict) -> frozenset[str]:
    raw = segment.get("annotations") or {}
    return frozenset(name for name in ANNOTATIONS if raw.get(name))


def _segment_to_span(segment: dict) -> TextSpan | None:
    annotations = _read_annotations(segment)
    kind = segment.get("type", "text")
    plain = segment.get("plain_text")

    if kind == "text":
        text = segment.get("text") or {}
        content = text.get("content", plain or "")
        link = (text.get("link") or {}).get("url") or segment.get("href")
        return TextSpan(content, annotations, link or None) if content else None

    if kind == "mention":
        mention = segment.get("mention") or {}
        if mention.get("type") == "page":
            page_id = normalize_id((mention.get("page") or {}).get("id", ""))
            return TextSpan(plain or "Untitled", annotations - {CODE}, mention=page_id)
        # Users, dates and link previews collapse to their display text.
        return TextSpan(plain, annotations, segment.get("href")) if plain else None

    if kind == "equation":
        expression = (segment.get("equation") or {}).get("expression", plain or "")
        return TextSpan(expression, annotations | {CODE}) if expression else None

    return TextSpan(plain, annotations) if plain else None


def rich_text_to_spans(segments: list[dict] | None) -> Spans:
    """Read a Notion ``rich_text`` array into spans."""
    spans = (_segment_to_span(segment) for segment in segments or [])
    return tuple(merge_spans([span for span in spans if span is not None]))


def rich_text_plain(segments: list[dict] | None) -> str:
    """Concatenate the ``plain_text`` (or text content) of *segments*."""
    parts: list[str] = []
    for segment in segments or []:
        text = segment.get("plain_text")
        if text is None:
            text = (segment.get("text") or {}).get("content", "")
        parts.append(text)
    return "".join(parts)
