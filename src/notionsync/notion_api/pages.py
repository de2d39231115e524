"""Wrappers around the Notion ``/pages`` endpoints."""

from __future__ import annotations

from typing import Any

from .transport import NotionTransport


def page_title(page: dict[str, Any]) -> str:
    """Return the plain-text title of a page object, or ``""``.

    The title lives in whichever property has type ``title``; its name
    differs between plain pages (``title``) and database rows.
    """
    for prop in page.get("properties", {}).values():
        if isinstance(prop, dict) and prop.get("type") == "title":
            return "".join(part.get("plain_text", "") for part in prop.get("title", []))
    return ""


class PageAPI:
    """Synchronous client for the page endpoints.

    Parameters
    ----------
    transport:
        The shared :class:`NotionTransport`.
    """

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def retrieve(self, page_id: str) -> dict[str, Any]:
        return self._transport.request("GET", f"/pages/{page_id}")

    def erase_content(self, page_id: str) -> dict[str, Any]:
        """Remove every block of *page_id* in a single call.

        Child pages are archived along with the other blocks; bring them
        back with :meth:`set_archived` or :meth:`set_parent`.
        """
        return self._transport.request(
            "PATCH", f"/pages/{page_id}", json={"erase_content": True}
        )

    def set_archived(self, page_id: str, archived: bool) -> dict[str, Any]:
        return self._transport.request(
            "PATCH", f"/pages/{page_id}", json={"archived": archived}
        )

    def set_parent(self, page_id: str, parent_id: str) -> dict[str, Any]:
        """Move *page_id* under *parent_id*, restoring it from the trash."""
        return self._transport.request(
            "PATCH",
            f"/pages/{page_id}",
            json={"parent": {"page_id": parent_id}, "archived": False},
        )
