"""Wrappers around the Notion ``/databases`` endpoints."""

from __future__ import annotations

from typing import Any

from .transport import NotionTransport


class DatabaseAPI:
    """Schema lookup and querying of databases.

    Parameters
    ----------
    transport:
        The shared :class:`NotionTransport`.
    """

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def retrieve(self, database_id: str) -> dict[str, Any]:
        return self._transport.request("GET", f"/databases/{database_id}")

    def query(
        self,
        database_id: str,
        filter: dict[str, Any] | None = None,
        sorts: list[dict[str, Any]] | None = None,
        page_size: int = 100,
        start_cursor: str | None = None,
    ) -> dict[str, Any]:
        """Run one page of a database query.

        Returns the raw response with ``results``, ``has_more`` and
        ``next_cursor``.
        """
        body: dict[str, Any] = {"page_size": page_size}
        if filter:
            body["filter"] = filter
        if sorts:
            body["sorts"] = sorts
        if start_cursor is not None:
            body["start_cursor"] = start_cursor
        return self._transport.request(
            "POST", f"/databases/{database_id}/query", json=body
        )
