"""Notion REST API wrappers."""

from __future__ import annotations

from .blocks import CHILDREN_KEY, BlockAPI, extract_block_ids
from .comments import CommentAPI
from .databases import DatabaseAPI
from .pages import PageAPI, page_title
from .transport import NotionTransport
from .users import UserAPI

__all__ = [
    "CHILDREN_KEY",
    "BlockAPI",
    "CommentAPI",
    "DatabaseAPI",
    "NotionTransport",
    "PageAPI",
    "UserAPI",
    "extract_block_ids",
    "page_title",
]
