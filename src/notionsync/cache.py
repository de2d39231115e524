"""Read-through cache of Notion user display names.

Comment authors and people properties reference users by id.  The cache
resolves each id once per client and remembers failures as ``"Unknown"``
so that a missing permission does not cost one request per comment.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from notionsync.errors import NotionSyncError
from notionsync.observability import get_logger, log_event

log = get_logger("notionsync.cache")

UNKNOWN_USER = "Unknown"


class UserNameCache:
    """Map user ids to display names, looking each id up at most once.

    Parameters
    ----------
    resolver:
        Returns the display name of a user id, raising
        :class:`NotionSyncError` when it cannot.

    Safe to share between threads; lookups of different ids may run
    concurrently, while the mapping itself is guarded by a lock.
    """

    def __init__(self, resolver: Callable[[str], str]) -> None:
        self._resolver = resolver
        self._names: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> str:
        """Return the display name of *user_id*, or ``"Unknown"``."""
        if not user_id:
            return UNKNOWN_USER
        with self._lock:
            cached = self._names.get(user_id)
        if cached is not None:
            return cached

        try:
            name = self._resolver(user_id) or UNKNOWN_USER
        except NotionSyncError as exc:
            log_event(
                log, logging.DEBUG, "user_lookup_failed",
                user_id=user_id, error_code=exc.code,
            )
            name = UNKNOWN_USER

        with self._lock:
            return self._names.setdefault(user_id, name)

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._names

    def __len__(self) -> int:
        with self._lock:
            return len(self._names)

    def clear(self) -> None:
        with self._lock:
            self._names.clear()
