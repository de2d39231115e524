"""Flatten Notion database rows into plain dicts.

A database query returns each row as a page whose ``properties`` are typed
objects.  :func:`flatten_page` reduces them to JSON-friendly values, one
level deep::

    {"_id": "…", "Name": "Task 1", "Status": "Done", "Tags": ["a", "b"]}
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from notionsync.converter.rich_text import rich_text_plain
from notionsync.models import SchemaProperty

NameResolver = Callable[[str], str]
_Flattener = Callable[[Any, NameResolver], Any]

MAX_QUERY_LIMIT = 100


def _user_name(user: Any, names: NameResolver) -> str | None:
    if not isinstance(user, dict):
        return None
    if user.get("name"):
        return user["name"]
    if user.get("id"):
        return names(user["id"])
    return None


def _named(value: Any, names: NameResolver) -> Any:
    return value.get("name") if isinstance(value, dict) else None


def _multi_named(value: Any, names: NameResolver) -> list[str]:
    return [item["name"] for item in value or [] if isinstance(item, dict) and "name" in item]


def _date(value: Any, names: NameResolver) -> Any:
    if not isinstance(value, dict):
        return None
    start = value.get("start")
    end = value.get("end")
    return {"start": start, "end": end} if end else start


def _people(value: Any, names: NameResolver) -> list[str]:
    resolved = (_user_name(user, names) for user in value or [])
    return [name for name in resolved if name]


def _relation(value: Any, names: NameResolver) -> list[str]:
    return [item["id"] for item in value or [] if isinstance(item, dict) and "id" in item]


def _typed_inner(value: Any, names: NameResolver) -> Any:
    """Formula and rollup values hold their result under their own type key."""
    if not isinstance(value, dict):
        return None
    inner = value.get(value.get("type", ""))
    if value.get("type") == "array" and isinstance(inner, list):
        return [flatten_property(item, names) for item in inner]
    if value.get("type") == "date":
        return _date(inner, names)
    return inner


def _files(value: Any, names: NameResolver) -> list[str]:
    urls: list[str] = []
    for item in value or []:
        if not isinstance(item, dict):
            continue
        data = item.get(item.get("type", ""))
        if isinstance(data, dict) and data.get("url"):
            urls.append(data["url"])
    return urls


def _scalar(value: Any, names: NameResolver) -> Any:
    return value


_FLATTENERS: dict[str, _Flattener] = {
    "title": lambda value, names: rich_text_plain(value),
    "rich_text": lambda value, names: rich_text_plain(value),
    "number": _scalar,
    "select": _named,
    "status": _named,
    "multi_select": _multi_named,
    "date": _date,
    "people": _people,
    "checkbox": _scalar,
    "url": _scalar,
    "email": _scalar,
    "phone_number": _scalar,
    "created_time": _scalar,
    "last_edited_time": _scalar,
    "created_by": _user_name,
    "last_edited_by": _user_name,
    "formula": _typed_inner,
    "rollup": _typed_inner,
    "relation": _relation,
    "files": _files,
}


def flatten_property(prop: dict[str, Any], names: NameResolver) -> Any:
    """Reduce one property value to a plain Python value.

    Parameters
    ----------
    prop:
        A property object such as ``{"type": "select", "select": {...}}``.
    names:
        Resolves user ids that come without a name.

    Returns
    -------
    Any
        ``str``, number, ``bool``, list, ``{"start", "end"}`` dict or
        ``None``.  Unknown property types give ``None``.
    """
    prop_type = prop.get("type", "")
    flattener = _FLATTENERS.get(prop_type)
    if flattener is None:
        return None
    return flattener(prop.get(prop_type), names)


def flatten_page(page: dict[str, Any], names: NameResolver) -> dict[str, Any]:
    """Flatten a database row; its id goes under ``_id``."""
    flat: dict[str, Any] = {"_id": page.get("id", "")}
    for name, prop in (page.get("properties") or {}).items():
        flat[name] = flatten_property(prop, names)
    return flat


def schema_from_database(database: dict[str, Any]) -> list[SchemaProperty]:
    """Property names and types of a database object, in API order."""
    return [
        SchemaProperty(name=name, type=prop.get("type", ""))
        for name, prop in (database.get("properties") or {}).items()
    ]


def clamp_limit(limit: int | None) -> int:
    """Clamp a requested row count into ``1..100``; unset or invalid means 100."""
    if limit is None or limit <= 0 or limit > MAX_QUERY_LIMIT:
        return MAX_QUERY_LIMIT
    return limit
