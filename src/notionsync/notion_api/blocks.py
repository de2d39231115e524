"""Wrappers around the Notion ``/blocks`` endpoints."""

from __future__ import annotations

from typing import Any

from .transport import NotionTransport

CHILDREN_KEY = "_children"
"""Key under which :meth:`BlockAPI.get_tree` stores fetched descendants."""

# Block types whose children live in a separate document.
_OPAQUE_TYPES: frozenset[str] = frozenset({"child_page", "child_database"})


def extract_block_ids(response: dict[str, Any]) -> list[str]:
    """Return the ids of the blocks created by an ``append_children`` call.

    Parameters
    ----------
    response:
        Body returned by ``PATCH /blocks/{id}/children``.

    Returns
    -------
    list[str]
        Ids in insertion order.  Notion returns the page's full first page
        of children when ``after`` is used, so callers that chain inserts
        should pick ids by position (see
        :func:`notionsync.reconcile.executor.last_inserted_id`).
    """
    return [item["id"] for item in response.get("results", []) if "id" in item]


class BlockAPI:
    """Synchronous client for the block endpoints.

    Parameters
    ----------
    transport:
        The shared :class:`NotionTransport`.
    """

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def retrieve(self, block_id: str) -> dict[str, Any]:
        return self._transport.request("GET", f"/blocks/{block_id}")

    def update(self, block_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Patch a block.

        *payload* has the shape ``{block_type: {...}}``; fields left out
        are not touched.
        """
        return self._transport.request("PATCH", f"/blocks/{block_id}", json=payload)

    def delete(self, block_id: str) -> dict[str, Any]:
        """Move a block to the trash."""
        return self._transport.request("DELETE", f"/blocks/{block_id}")

    def get_children(self, block_id: str) -> list[dict[str, Any]]:
        """Return every direct child of *block_id*, following pagination."""
        return list(self._transport.paginate(f"/blocks/{block_id}/children"))

    def get_tree(self, block_id: str) -> list[dict[str, Any]]:
        """Return the children of *block_id* with descendants expanded.

        Every record flagged ``has_children`` gets its own children fetched
        recursively and stored under :data:`CHILDREN_KEY`.  Child pages and
        child databases are left unexpanded.
        """
        records = self.get_children(block_id)
        for record in records:
            if record.get("has_children") and record.get("type") not in _OPAQUE_TYPES:
                record[CHILDREN_KEY] = self.get_tree(record["id"])
        return records

    def append_children(
        self,
        block_id: str,
        children: list[dict[str, Any]],
        after: str | None = None,
    ) -> dict[str, Any]:
        """Append up to 100 *children* to *block_id*.

        Parameters
        ----------
        block_id:
            Parent page or block.
        children:
            Block payloads.
        after:
            Existing child to insert after.  ``None`` appends at the end.
        """
        body: dict[str, Any] = {"children": children}
        if after is not None:
            body["after"] = after
        return self._transport.request("PATCH", f"/blocks/{block_id}/children", json=body)
