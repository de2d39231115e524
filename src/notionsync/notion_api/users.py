"""Wrapper around the Notion ``/users`` endpoint."""

from __future__ import annotations

from typing import Any

from notionsync.errors import NotionSyncNotFoundError

from .transport import NotionTransport


class UserAPI:
    """Read access to workspace users.

    Parameters
    ----------
    transport:
        The shared :class:`NotionTransport`.
    """

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def retrieve(self, user_id: str) -> dict[str, Any]:
        return self._transport.request("GET", f"/users/{user_id}")

    def display_name(self, user_id: str) -> str:
        """Return the ``name`` of *user_id*.

        Raises
        ------
        NotionSyncError
            When the lookup fails, including a user with no name.
        """
        name = self.retrieve(user_id).get("name")
        if not name:
            raise NotionSyncNotFoundError(
                message=f"User {user_id} has no display name",
                context={"path": f"/users/{user_id}"},
            )
        return name
