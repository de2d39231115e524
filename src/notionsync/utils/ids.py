"""Notion id helpers.

Notion accepts page and block ids with or without dashes.  Documents store
the compact 32-character form; comparisons always go through
:func:`normalize_id`.
"""

from __future__ import annotations

import re

_URL_ID_RE = re.compile(r"([0-9a-fA-F]{32})(?:[?#].*)?$")


def normalize_id(raw: str) -> str:
    """Return *raw* with dashes and surrounding whitespace removed.

    A full Notion URL is also accepted; the trailing 32-hex-digit id is
    extracted from it.

    >>> normalize_id("1f2e3d4c-5b6a-7980-1a2b-3c4d5e6f7a8b")
    '1f2e3d4c5b6a79801a2b3c4d5e6f7a8b'
    """
    value = raw.strip().replace("-", "")
    if "/" in value:
        match = _URL_ID_RE.search(value)
        if match:
            return match.group(1).lower()
    return value.lower() if len(value) == 32 else value


def format_id(raw: str) -> str:
    """Return the dashed 8-4-4-4-12 form of a 32-character id.

    Ids of any other length are returned normalised but undashed.
    """
    value = normalize_id(raw)
    if len(value) != 32:
        return value
    return f"{value[:8]}-{value[8:12]}-{value[12:16]}-{value[16:20]}-{value[20:]}"
