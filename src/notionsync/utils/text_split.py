"""Split long strings for Notion's 2000-character ``rich_text`` limit.

Python strings index by code point, so slicing never cuts a character in
half.
"""

from __future__ import annotations

RICH_TEXT_LIMIT = 2000


def split_string(text: str, limit: int = RICH_TEXT_LIMIT) -> list[str]:
    """Split *text* into pieces of at most *limit* characters.

    Returns ``[]`` for an empty string; otherwise the pieces concatenate
    back to *text*.

    >>> split_string("abcdefg", 3)
    ['abc', 'def', 'g']
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")
    return [text[i : i + limit] for i in range(0, len(text), limit)]
