"""Wrapper around the Notion ``/comments`` endpoint."""

from __future__ import annotations

from typing import Any

from .transport import NotionTransport


class CommentAPI:
    """Read access to comments.

    Parameters
    ----------
    transport:
        The shared :class:`NotionTransport`.
    """

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def list(self, block_id: str) -> list[dict[str, Any]]:
        """Return all comments on the page or block *block_id*."""
        return list(
            self._transport.paginate("/comments", params={"block_id": block_id})
        )
