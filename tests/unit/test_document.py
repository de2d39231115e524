"""Tests for the document file format (document.py)."""

from __future__ import annotations

from datetime import datetime, timezone

from notionsync.document import (
    attach_comment_section,
    extract_comment_section,
    format_comment,
    parse_comment_line,
    parse_document,
    render_document,
    render_header,
    sanitize_filename,
    split_header,
)
from notionsync.models import ChildPageAnchor, Comment, Document, Heading, Paragraph, TextSpan

PAGE_ID = "1f2e3d4c5b6a79801a2b3c4d5e6f7a8b"
CHILD_A = "0a1b2c3d4e5f60718293a4b5c6d7e8f9"
CHILD_B = "1b2c3d4e5f60718293a4b5c6d7e8f90a"


def _t(text):
    return (TextSpan(text),)


# =========================================================================
# Header
# =========================================================================


class TestHeader:
    def test_round_trip_keeps_id_and_child_order(self):
        doc = Document(remote_id="abc123", title="Notes", child_page_ids=[CHILD_B, CHILD_A])
        parsed = parse_document(render_document(doc))
        assert parsed.remote_id == "abc123"
        assert parsed.child_page_ids == [CHILD_B, CHILD_A]

    def test_render_layout(self):
        doc = Document(
            remote_id=PAGE_ID,
            title="Weekly notes",
            pulled_at=datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc),
            child_page_ids=[CHILD_A],
        )
        assert render_header(doc) == (
            "---\n"
            f"notion_id: {PAGE_ID}\n"
            "title: Weekly notes\n"
            "pulled_at: '2026-01-05T09:30:00+00:00'\n"
            "child_pages:\n"
            f"  - {CHILD_A}\n"
            "---\n"
        )

    def test_optional_keys_left_out(self):
        header = render_header(Document(remote_id=PAGE_ID))
        assert "pulled_at" not in header
        assert "child_pages" not in header

    def test_title_needing_quotes(self):
        doc = Document(remote_id=PAGE_ID, title="Plan: Q1 #2")
        assert parse_document(render_document(doc)).title == "Plan: Q1 #2"

    def test_pulled_at_round_trip(self):
        when = datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc)
        doc = Document(remote_id=PAGE_ID, pulled_at=when)
        assert parse_document(render_document(doc)).pulled_at == when

    def test_dashed_id_is_normalised(self):
        text = "---\nnotion_id: 1f2e3d4c-5b6a-7980-1a2b-3c4d5e6f7a8b\n---\nbody\n"
        assert parse_document(text).remote_id == PAGE_ID

    def test_numeric_looking_id_stays_a_string(self):
        meta, _ = split_header("---\nnotion_id: 12345\n---\n")
        assert meta["notion_id"] == "12345"

    def test_no_header(self):
        meta, body = split_header("# Just a body")
        assert meta == {}
        assert body == "# Just a body"
        assert parse_document("# Just a body").remote_id == ""

    def test_broken_yaml_falls_back_to_line_scan(self):
        text = f"---\nnotion_id: {PAGE_ID}\ntitle: [unbalanced\nchild_pages:\n  - {CHILD_A}\n---\nbody"
        doc = parse_document(text)
        assert doc.remote_id == PAGE_ID
        assert doc.child_page_ids == [CHILD_A]
        assert doc.blocks == [Paragraph(_t("body"))]


# =========================================================================
# Comments section
# =========================================================================


class TestComments:
    def _comment(self, body="Looks good"):
        return Comment("Ada", datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc), body)

    def test_format(self):
        assert format_comment(self._comment()) == "> **Ada** *(Jan 5, 2026)*: Looks good"

    def test_multiline_body_flattened(self):
        assert format_comment(self._comment("a\nb")).endswith(": a b")

    def test_parse_line(self):
        comment = parse_comment_line("> **Ada** *(Jan 5, 2026)*: Looks good")
        assert comment.author == "Ada"
        assert comment.body == "Looks good"
        assert comment.created_at.date() == datetime(2026, 1, 5).date()

    def test_parse_line_rejects_other_quotes(self):
        assert parse_comment_line("> just a quote") is None
        assert parse_comment_line("> **Ada** *(someday)*: hi") is None

    def test_attach_then_extract(self):
        body = attach_comment_section("Body text", [self._comment()])
        assert body == "Body text\n\n---\n\n## Comments\n\n> **Ada** *(Jan 5, 2026)*: Looks good\n"
        content, section = extract_comment_section(body)
        assert content == "Body text"
        assert section == "> **Ada** *(Jan 5, 2026)*: Looks good"

    def test_attach_nothing(self):
        assert attach_comment_section("Body", []) == "Body"

    def test_extract_without_section(self):
        assert extract_comment_section("a\n\n---\n\nb") == ("a\n\n---\n\nb", "")

    def test_last_comments_heading_wins(self):
        body = "## Comments\n\nintro\n\n---\n\n## Comments\n\n> x"
        content, section = extract_comment_section(body)
        assert content == "## Comments\n\nintro"
        assert section == "> x"

    def test_document_comments_are_not_body_blocks(self):
        doc = Document(remote_id=PAGE_ID, blocks=[Paragraph(_t("Body"))], comments=[self._comment()])
        parsed = parse_document(render_document(doc))
        assert parsed.blocks == [Paragraph(_t("Body"))]
        assert [c.body for c in parsed.comments] == ["Looks good"]


# =========================================================================
# Documents
# =========================================================================


class TestDocument:
    def test_full_render(self):
        doc = Document(
            remote_id=PAGE_ID,
            title="T",
            blocks=[Heading(1, _t("Hello")), ChildPageAnchor(CHILD_A, "Specs"), Paragraph(_t("World"))],
        )
        text = render_document(doc)
        assert text.endswith(f"# Hello\n\n<!-- child_page: {CHILD_A} | Specs -->\n\nWorld\n")
        assert parse_document(text).blocks == doc.blocks

    def test_empty_last_block_survives(self):
        blocks = [Paragraph(_t("para")), Heading(1, ())]
        text = render_document(Document(remote_id=PAGE_ID, blocks=blocks))
        assert text.endswith("para\n\n# \n")
        assert parse_document(text).blocks == blocks

    def test_empty_last_block_before_comments_survives(self):
        blocks = [Paragraph(_t("para")), Heading(2, ())]
        comment = Comment("Ada", datetime(2026, 1, 5, tzinfo=timezone.utc), "ok")
        parsed = parse_document(render_document(Document(remote_id=PAGE_ID, blocks=blocks, comments=[comment])))
        assert parsed.blocks == blocks
        assert [c.body for c in parsed.comments] == ["ok"]

    def test_trailing_ids_omitted_from_body(self):
        doc = Document(remote_id=PAGE_ID, blocks=[Paragraph(_t("x")), ChildPageAnchor(CHILD_A, "Specs")])
        assert "child_page:" not in render_document(doc, trailing_ids=[CHILD_A]).split("---\n", 2)[2]


class TestSanitizeFilename:
    def test_unsafe_characters(self):
        assert sanitize_filename('a/b:c*d?"e<f>g|h\\i') == "a_b_c_d__e_f_g_h_i"

    def test_truncated(self):
        assert len(sanitize_filename("x" * 300)) == 100
