"""Tests for the endpoint wrappers (blocks, pages, comments, users, databases).

The transport is a MagicMock; these tests pin the HTTP method, path and
body each wrapper sends.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from notionsync.errors import NotionSyncNotFoundError
from notionsync.notion_api import (
    CHILDREN_KEY,
    BlockAPI,
    CommentAPI,
    DatabaseAPI,
    PageAPI,
    UserAPI,
    extract_block_ids,
    page_title,
)


@pytest.fixture
def transport():
    return MagicMock()


class TestBlockAPI:
    def test_update_and_delete(self, transport):
        api = BlockAPI(transport)
        api.update("b1", {"paragraph": {"rich_text": []}})
        api.delete("b1")
        assert transport.request.call_args_list[0].args == ("PATCH", "/blocks/b1")
        assert transport.request.call_args_list[0].kwargs == {"json": {"paragraph": {"rich_text": []}}}
        assert transport.request.call_args_list[1].args == ("DELETE", "/blocks/b1")

    def test_append_with_after(self, transport):
        BlockAPI(transport).append_children("p1", [{"type": "divider"}], after="b9")
        transport.request.assert_called_once_with(
            "PATCH", "/blocks/p1/children", json={"children": [{"type": "divider"}], "after": "b9"}
        )

    def test_append_without_after(self, transport):
        BlockAPI(transport).append_children("p1", [])
        assert transport.request.call_args.kwargs["json"] == {"children": []}

    def test_get_children_paginates(self, transport):
        transport.paginate.return_value = iter([{"id": "a"}])
        assert BlockAPI(transport).get_children("p1") == [{"id": "a"}]
        transport.paginate.assert_called_once_with("/blocks/p1/children")

    def test_get_tree_expands_but_not_child_pages(self, transport):
        tree = {
            "p1": [
                {"id": "a", "type": "toggle", "has_children": True},
                {"id": "c", "type": "child_page", "has_children": True},
            ],
            "a": [{"id": "a1", "type": "paragraph", "has_children": False}],
        }
        transport.paginate.side_effect = lambda path: iter(tree[path.split("/")[2]])

        records = BlockAPI(transport).get_tree("p1")

        assert records[0][CHILDREN_KEY] == [{"id": "a1", "type": "paragraph", "has_children": False}]
        assert CHILDREN_KEY not in records[1]
        assert transport.paginate.call_count == 2

    def test_extract_block_ids(self):
        assert extract_block_ids({"results": [{"id": "a"}, {"object": "x"}, {"id": "b"}]}) == ["a", "b"]


class TestPageAPI:
    def test_erase_content(self, transport):
        PageAPI(transport).erase_content("p1")
        transport.request.assert_called_once_with("PATCH", "/pages/p1", json={"erase_content": True})

    def test_set_archived(self, transport):
        PageAPI(transport).set_archived("c1", False)
        transport.request.assert_called_once_with("PATCH", "/pages/c1", json={"archived": False})

    def test_set_parent(self, transport):
        PageAPI(transport).set_parent("c1", "p1")
        transport.request.assert_called_once_with(
            "PATCH", "/pages/c1", json={"parent": {"page_id": "p1"}, "archived": False}
        )

    def test_page_title(self):
        page = {"properties": {"Name": {"type": "title", "title": [{"plain_text": "Week"}, {"plain_text": " 1"}]}}}
        assert page_title(page) == "Week 1"
        assert page_title({}) == ""


class TestCommentAndUserAPI:
    def test_comments_listed_by_block(self, transport):
        transport.paginate.return_value = iter([{"id": "c1"}])
        assert CommentAPI(transport).list("p1") == [{"id": "c1"}]
        transport.paginate.assert_called_once_with("/comments", params={"block_id": "p1"})

    def test_display_name(self, transport):
        transport.request.return_value = {"name": "Ada"}
        assert UserAPI(transport).display_name("u1") == "Ada"
        transport.request.assert_called_once_with("GET", "/users/u1")

    def test_nameless_user_is_not_found(self, transport):
        transport.request.return_value = {"name": None}
        with pytest.raises(NotionSyncNotFoundError):
            UserAPI(transport).display_name("bot")


class TestDatabaseAPI:
    def test_retrieve(self, transport):
        DatabaseAPI(transport).retrieve("d1")
        transport.request.assert_called_once_with("GET", "/databases/d1")

    def test_query_body(self, transport):
        DatabaseAPI(transport).query("d1", filter={"property": "Done"}, page_size=10, start_cursor="c")
        transport.request.assert_called_once_with(
            "POST",
            "/databases/d1/query",
            json={"page_size": 10, "filter": {"property": "Done"}, "start_cursor": "c"},
        )

    def test_query_minimal_body(self, transport):
        DatabaseAPI(transport).query("d1")
        assert transport.request.call_args.kwargs["json"] == {"page_size": 100}
