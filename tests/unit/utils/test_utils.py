"""Tests for the utils package: chunking, splitting, ids and redaction."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from notionsync.utils import chunk_blocks, format_id, normalize_id, redact, split_string

COMPACT = "1f2e3d4c5b6a79801a2b3c4d5e6f7a8b"
DASHED = "1f2e3d4c-5b6a-7980-1a2b-3c4d5e6f7a8b"


# =========================================================================
# chunk_blocks
# =========================================================================


class TestChunkBlocks:
    def test_even_and_remainder(self):
        assert chunk_blocks(list(range(5)), 2) == [[0, 1], [2, 3], [4]]

    def test_empty(self):
        assert chunk_blocks([], 100) == []

    def test_default_size(self):
        assert [len(c) for c in chunk_blocks(list(range(250)))] == [100, 100, 50]

    @pytest.mark.parametrize("size", [0, 101])
    def test_invalid_size(self, size):
        with pytest.raises(ValueError):
            chunk_blocks([1], size)

    @given(st.lists(st.integers()), st.integers(min_value=1, max_value=100))
    def test_concatenation_preserved(self, items, size):
        chunks = chunk_blocks(items, size)
        assert [x for chunk in chunks for x in chunk] == items
        assert all(1 <= len(chunk) <= size for chunk in chunks)


# =========================================================================
# split_string
# =========================================================================


class TestSplitString:
    def test_split(self):
        assert split_string("abcdefg", 3) == ["abc", "def", "g"]

    def test_empty(self):
        assert split_string("") == []

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            split_string("a", 0)

    @given(st.text(), st.integers(min_value=1, max_value=50))
    def test_pieces_rejoin(self, text, limit):
        pieces = split_string(text, limit)
        assert "".join(pieces) == text
        assert all(len(piece) <= limit for piece in pieces)


# =========================================================================
# ids
# =========================================================================


class TestIds:
    def test_dashes_removed(self):
        assert normalize_id(DASHED) == COMPACT

    def test_uppercase_lowered(self):
        assert normalize_id(COMPACT.upper()) == COMPACT

    def test_whitespace_stripped(self):
        assert normalize_id(f"  {COMPACT}\n") == COMPACT

    def test_url(self):
        assert normalize_id(f"https://www.notion.so/team/My-Page-{COMPACT}?pvs=4") == COMPACT

    def test_short_id_kept(self):
        assert normalize_id("abc-123") == "abc123"

    def test_format_id(self):
        assert format_id(COMPACT) == DASHED
        assert format_id(DASHED) == DASHED
        assert format_id("abc") == "abc"


# =========================================================================
# redact
# =========================================================================


class TestRedact:
    def test_authorization_header(self):
        assert redact({"Authorization": "Bearer secret_abc"}) == {"Authorization": "Bearer <redacted>"}

    def test_token_masked_everywhere(self):
        out = redact({"note": ["x secret_abcdefgh y"]}, token="secret_abcdefgh")
        assert out == {"note": ["x <redacted:...efgh> y"]}

    def test_sensitive_keys(self):
        out = redact({"person": {"email": "a@b.c"}, "api_key": "k", "name": "Ada"})
        assert out == {"person": {"email": "<redacted>"}, "api_key": "<redacted>", "name": "Ada"}

    def test_input_untouched(self):
        payload = {"password": "p"}
        redact(payload)
        assert payload == {"password": "p"}
