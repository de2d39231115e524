"""JSON-lines logging for notionsync.

Each record becomes one JSON object per line, for example::

    {"ts": "2026-01-05T09:30:00.000000+00:00", "level": "WARNING",
     "logger": "notionsync.reconcile", "message": "strategy_fallback",
     "page_id": "abc123", "reason": "leading_child_page_moved"}

Structured fields travel in ``extra={"extra_fields": {...}}``;
:func:`log_event` wraps that for the common case.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER = "notionsync"


class StructuredFormatter(logging.Formatter):
    """Render a :class:`logging.LogRecord` as a single JSON line.

    Always present: ``ts`` (UTC, ISO-8601), ``level``, ``logger`` and
    ``message``.  Fields passed as ``extra_fields`` are merged at the top
    level; exception and stack text are added when the record carries them.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        fields: dict[str, Any] | None = getattr(record, "extra_fields", None)
        if fields:
            entry.update(fields)

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


# Names that already carry our handler; keeps get_logger idempotent.
_configured_loggers: set[str] = set()


def get_logger(
    name: str = ROOT_LOGGER,
    *,
    level: int | str = logging.INFO,
    stream: Any | None = None,
) -> logging.Logger:
    """Return a logger that writes JSON lines.

    Only names outside the ``notionsync`` hierarchy, and the root
    ``notionsync`` logger itself, get their own handler.  Sub-loggers such
    as ``notionsync.reconcile`` propagate to the root one so a caller can
    silence the whole package in one place.

    Parameters
    ----------
    name:
        Logger name.
    level:
        Level applied the first time the logger is configured.  Accepts an
        ``int`` or a level name such as ``"DEBUG"``.
    stream:
        Destination of the handler.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
    """
    logger = logging.getLogger(name)
    if name in _configured_loggers:
        return logger

    if name.startswith(ROOT_LOGGER + "."):
        get_logger(ROOT_LOGGER, level=level, stream=stream)
    else:
        resolved = logging.getLevelName(level.upper()) if isinstance(level, str) else level
        logger.setLevel(resolved)
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.propagate = False

    _configured_loggers.add(name)
    return logger


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """Log *event* with *fields* attached as structured data."""
    logger.log(level, event, extra={"extra_fields": fields})
