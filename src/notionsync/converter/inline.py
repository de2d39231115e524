"""Inline markup <-> :class:`TextSpan` lists.

Supported markup::

    **bold**  *italic*  `code`  ~~strike~~  [text](url)  [@Title](ref:<page_id>)

Annotations nest in a fixed order when encoding: code innermost, then
italic, then bold, then strikethrough, and a link wraps the whole run.
``***x***`` therefore always means bold wrapping italic.

The decoder is a single left-to-right scan.  It never raises: a delimiter
without a partner, or with nothing between it and its partner, is kept as
literal text.
"""

from __future__ import annotations

import re

from notionsync.models import BOLD, CODE, ITALIC, STRIKETHROUGH, Spans, TextSpan

MENTION_SCHEME = "ref:"

_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def merge_spans(spans: Spans | list[TextSpan]) -> list[TextSpan]:
    """Join neighbouring spans that share formatting; drop empty ones."""
    merged: list[TextSpan] = []
    for span in spans:
        if not span.content and span.mention is None:
            continue
        if merged and merged[-1].same_format(span):
            prev = merged[-1]
            merged[-1] = TextSpan(
                prev.content + span.content, prev.annotations, prev.link
            )
        else:
            merged.append(span)
    return merged


def _wrap(text: str, annotations: frozenset[str], *, code_allowed: bool = True) -> str:
    if CODE in annotations and code_allowed:
        text = f"`{text}`"
    if ITALIC in annotations:
        text = f"*{text}*"
    if BOLD in annotations:
        text = f"**{text}**"
    if STRIKETHROUGH in annotations:
        text = f"~~{text}~~"
    return text


def encode_inline(spans: Spans | list[TextSpan]) -> str:
    """Render *spans* as inline markup.

    Mentions keep their bold, italic and strikethrough wrapping; a code
    annotation on a mention cannot be expressed and is dropped.
    """
    parts: list[str] = []
    for span in merge_spans(spans):
        if span.mention is not None:
            label = f"[@{span.content}]({MENTION_SCHEME}{span.mention})"
            parts.append(_wrap(label, span.annotations, code_allowed=False))
            continue
        text = _wrap(span.content, span.annotations)
        if span.link:
            text = f"[{text}]({span.link})"
        parts.append(text)
    return "".join(parts)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _star_run(text: str, pos: int) -> int:
    end = pos
    while end < len(text) and text[end] == "*":
        end += 1
    return end - pos


def _match_bold(text: str, pos: int) -> tuple[str, int] | None:
    """Find the partner of the ``**`` at *pos*.

    Returns the enclosed text and the index just past the closer.  An
    opener of three or more stars closes on the last two stars of the next
    run of three or more, so the stars in between stay with the content.
    """
    run = _star_run(text, pos)
    if run >= 3:
        k = pos + run
        while k < len(text):
            if text[k] == "*":
                close = _star_run(text, k)
                if close >= 3:
                    end = k + close
                    return text[pos + 2 : end - 2], end
                k += close
            else:
                k += 1

    close = text.find("**", pos + 2)
    if close <= pos + 2:
        return None
    return text[pos + 2 : close], close + 2


def _match_pair(text: str, pos: int, delim: str) -> tuple[str, int] | None:
    """Find *delim* after the *delim* opening at *pos*, content non-empty."""
    start = pos + len(delim)
    close = text.find(delim, start)
    if close <= start:
        return None
    return text[start:close], close + len(delim)


class _Scanner:
    """Accumulates literal characters and emitted spans for one scan."""

    __slots__ = ("annotations", "buffer", "link", "spans")

    def __init__(self, annotations: frozenset[str], link: str | None) -> None:
        self.annotations = annotations
        self.link = link
        self.buffer: list[str] = []
        self.spans: list[TextSpan] = []

    def flush(self) -> None:
        if self.buffer:
            self.spans.append(TextSpan("".join(self.buffer), self.annotations, self.link))
            self.buffer.clear()


def _decode(text: str, annotations: frozenset[str], link: str | None) -> list[TextSpan]:
    scan = _Scanner(annotations, link)
    i = 0
    n = len(text)

    while i < n:
        char = text[i]

        if char == "*":
            if text.startswith("**", i):
                match = _match_bold(text, i)
                if match is not None:
                    scan.flush()
                    scan.spans.extend(_decode(match[0], annotations | {BOLD}, link))
                    i = match[1]
                    continue
            else:
                match = _match_pair(text, i, "*")
                if match is not None:
                    scan.flush()
                    scan.spans.extend(_decode(match[0], annotations | {ITALIC}, link))
                    i = match[1]
                    continue

        elif char == "`":
            match = _match_pair(text, i, "`")
            if match is not None:
                scan.flush()
                scan.spans.append(TextSpan(match[0], annotations | {CODE}, link))
                i = match[1]
                continue

        elif char == "~" and text.startswith("~~", i):
            match = _match_pair(text, i, "~~")
            if match is not None:
                scan.flush()
                scan.spans.extend(_decode(match[0], annotations | {STRIKETHROUGH}, link))
                i = match[1]
                continue

        elif char == "[":
            found = _LINK_RE.match(text, i)
            if found is not None:
                label, target = found.group(1), found.group(2)
                scan.flush()
                if label.startswith("@") and target.startswith(MENTION_SCHEME):
                    scan.spans.append(
                        TextSpan(
                            label[1:],
                            annotations - {CODE},
                            mention=target[len(MENTION_SCHEME):],
                        )
                    )
                else:
                    scan.spans.extend(_decode(label, annotations, target))
                i = found.end()
                continue

        scan.buffer.append(char)
        i += 1

    scan.flush()
    return scan.spans


def decode_inline(text: str) -> list[TextSpan]:
    """Parse inline markup into spans.

    Never raises.  Every input character ends up either in some span's
    content or in a delimiter that produced an annotation, link or mention.
    """
    return merge_spans(_decode(text, frozenset(), None))
