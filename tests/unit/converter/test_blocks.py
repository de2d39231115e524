"""Tests for the Markdown block codec (converter/blocks.py)."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from notionsync.converter.blocks import decode_blocks, encode_block, encode_blocks, renumber
from notionsync.models import (
    BOLD,
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
    TextSpan,
    plain_text,
)

CHILD_ID = "0a1b2c3d4e5f60718293a4b5c6d7e8f9"


def _t(text):
    return (TextSpan(text),)


# =========================================================================
# Decoding
# =========================================================================


class TestDecodeLines:
    def test_headings(self):
        blocks = decode_blocks("# One\n## Two\n### Three\n#### Four")
        assert blocks[:3] == [Heading(1, _t("One")), Heading(2, _t("Two")), Heading(3, _t("Three"))]
        assert blocks[3] == Paragraph(_t("#### Four"))

    def test_blank_lines_are_dropped(self):
        assert decode_blocks("\n\nfirst\n\n\nsecond\n") == [
            Paragraph(_t("first")),
            Paragraph(_t("second")),
        ]

    def test_crlf_line_endings(self):
        assert decode_blocks("# Title\r\ntext\r\n") == [Heading(1, _t("Title")), Paragraph(_t("text"))]

    def test_divider_must_be_exact(self):
        assert decode_blocks("---") == [Divider()]
        assert decode_blocks("----") == [Paragraph(_t("----"))]

    def test_checkboxes(self):
        assert decode_blocks("- [ ] todo\n- [x] done\n- [X] also") == [
            Checkbox(_t("todo"), False),
            Checkbox(_t("done"), True),
            Checkbox(_t("also"), True),
        ]

    def test_empty_checkbox(self):
        assert decode_blocks("- [x]") == [Checkbox((), True)]

    def test_bullet_and_quote(self):
        assert decode_blocks("- item\n> said") == [BulletItem(_t("item")), Quote(_t("said"))]

    def test_inline_markup_inside_blocks(self):
        (block,) = decode_blocks("- a **b**")
        assert block.spans == (TextSpan("a "), TextSpan("b", frozenset({BOLD})))

    def test_numbered_ordinals_reset(self):
        blocks = decode_blocks("1. a\n2. b\n- c\n1. d")
        ordinals = [b.ordinal if isinstance(b, NumberedItem) else None for b in blocks]
        assert ordinals == [1, 2, None, 1]

    def test_written_numbers_are_ignored(self):
        blocks = decode_blocks("5. a\n9. b")
        assert [b.ordinal for b in blocks] == [1, 2]

    def test_anchor(self):
        blocks = decode_blocks(f"<!-- child_page: {CHILD_ID} | Specs -->")
        assert blocks == [ChildPageAnchor(CHILD_ID, "Specs")]

    def test_anchor_with_dashed_id_is_normalised(self):
        dashed = "0a1b2c3d-4e5f-6071-8293-a4b5c6d7e8f9"
        (block,) = decode_blocks(f"<!-- child_page: {dashed} -->")
        assert block == ChildPageAnchor(CHILD_ID, "")


class TestDecodeFence:
    def test_fenced_code_keeps_blank_lines(self):
        (block,) = decode_blocks("```python\nx = 1\n\n# not a heading\n```")
        assert block == CodeBlock("x = 1\n\n# not a heading", "python")

    def test_unterminated_fence_runs_to_end(self):
        blocks = decode_blocks("```\nline one\n- line two")
        assert blocks == [CodeBlock("line one\n- line two", "")]

    def test_content_after_fence(self):
        blocks = decode_blocks("```\ncode\n```\nafter")
        assert blocks == [CodeBlock("code", ""), Paragraph(_t("after"))]


class TestDecodeTable:
    def test_header_table(self):
        text = "| Name | Status |\n| --- | --- |\n| Task 1 | Done |"
        (table,) = decode_blocks(text)
        assert isinstance(table, Table)
        assert table.has_header_row is True
        assert [[plain_text(c) for c in row] for row in table.rows] == [
            ["Name", "Status"],
            ["Task 1", "Done"],
        ]

    def test_table_without_separator_has_no_header(self):
        (table,) = decode_blocks("| a | b |\n| c | d |")
        assert table.has_header_row is False
        assert len(table.rows) == 2

    def test_short_rows_are_padded_and_long_rows_cut(self):
        (table,) = decode_blocks("| a | b | c |\n|---|---|---|\n| d |\n| e | f | g | h |")
        assert [[plain_text(c) for c in row] for row in table.rows] == [
            ["a", "b", "c"],
            ["d", "", ""],
            ["e", "f", "g"],
        ]

    def test_aligned_separator(self):
        (table,) = decode_blocks("| a | b |\n| :--- | ---: |\n| 1 | 2 |")
        assert table.has_header_row is True

    def test_header_only_table_stays_a_table(self):
        (table,) = decode_blocks("| Name | Status |\n| --- | --- |")
        assert isinstance(table, Table)
        assert table.has_header_row is True
        assert [[plain_text(c) for c in row] for row in table.rows] == [["Name", "Status"]]

    def test_separator_only_degrades_to_paragraph(self):
        assert decode_blocks("| --- |") == [Paragraph(_t("| --- |"))]

    def test_table_stops_at_first_other_line(self):
        blocks = decode_blocks("| a |\ntext")
        assert isinstance(blocks[0], Table)
        assert blocks[1] == Paragraph(_t("text"))


# =========================================================================
# Encoding
# =========================================================================


class TestEncodeBlocks:
    def test_blank_line_between_blocks(self):
        text = encode_blocks([Heading(1, _t("T")), Paragraph(_t("p")), Divider()])
        assert text == "# T\n\np\n\n---"

    def test_list_items_are_contiguous(self):
        blocks = [BulletItem(_t("a")), Checkbox(_t("b"), True), NumberedItem(_t("c"))]
        assert encode_blocks(blocks) == "- a\n- [x] b\n1. c"

    def test_ordinals_recomputed(self):
        blocks = [NumberedItem(_t("a"), 7), NumberedItem(_t("b"), 7), Paragraph(_t("p")), NumberedItem(_t("c"), 3)]
        assert encode_blocks(blocks) == "1. a\n2. b\n\np\n\n1. c"

    def test_code_block(self):
        assert encode_block(CodeBlock("print(1)", "py")) == "```py\nprint(1)\n```"
        assert encode_block(CodeBlock("", "")) == "```\n```"

    def test_table(self):
        table = Table(((_t("Name"), _t("Status")), (_t("Task 1"), _t("Done"))), True)
        assert encode_block(table) == "| Name | Status |\n| --- | --- |\n| Task 1 | Done |"

    def test_anchor(self):
        assert encode_block(ChildPageAnchor(CHILD_ID, "Specs")) == f"<!-- child_page: {CHILD_ID} | Specs -->"

    def test_trailing_anchors_omitted(self):
        blocks = [Paragraph(_t("p")), ChildPageAnchor(CHILD_ID, "Specs")]
        assert encode_blocks(blocks, trailing_ids=[CHILD_ID]) == "p"

    def test_flagged_trailing_anchor_omitted(self):
        blocks = [Paragraph(_t("p")), ChildPageAnchor(CHILD_ID, "Specs", trailing=True)]
        assert encode_blocks(blocks) == "p"

    def test_not_a_block(self):
        with pytest.raises(TypeError):
            encode_block("paragraph")


class TestRenumber:
    def test_anchor_breaks_a_run(self):
        blocks = renumber([NumberedItem(_t("a")), ChildPageAnchor(CHILD_ID), NumberedItem(_t("b"))])
        assert [b.ordinal for b in blocks if isinstance(b, NumberedItem)] == [1, 1]


# =========================================================================
# Round-trip and idempotence
# =========================================================================

_word = st.text(st.sampled_from(list("abcdefgh")), min_size=1, max_size=6)
_line = st.lists(_word, min_size=1, max_size=4).map(" ".join)
_spans = _line.map(_t)

_block = st.one_of(
    st.builds(Heading, st.integers(1, 3), _spans),
    st.builds(Paragraph, _spans),
    st.builds(BulletItem, _spans),
    st.builds(NumberedItem, _spans),
    st.builds(Checkbox, _spans, st.booleans()),
    st.builds(Quote, _spans),
    st.builds(CodeBlock, st.lists(_line, max_size=3).map("\n".join), st.sampled_from(["", "python", "go"])),
    st.just(Divider()),
    st.builds(
        lambda rows, header: Table(tuple(tuple(_t(c) for c in row) for row in rows), header),
        st.integers(1, 3).flatmap(lambda w: st.lists(st.lists(_word, min_size=w, max_size=w), min_size=1, max_size=3)),
        st.booleans(),
    ),
    st.builds(ChildPageAnchor, st.just(CHILD_ID), _line),
)


class TestBlockProperties:
    @given(st.lists(_block, max_size=8))
    def test_encode_is_idempotent(self, blocks):
        text = encode_blocks(blocks)
        assert encode_blocks(decode_blocks(text)) == text

    @given(st.lists(_block, max_size=8))
    def test_decode_round_trips(self, blocks):
        decoded = decode_blocks(encode_blocks(blocks))
        assert decode_blocks(encode_blocks(decoded)) == decoded
        assert [type(b) for b in decoded] == [type(b) for b in blocks]
