"""Push planning and execution."""

from __future__ import annotations

from .executor import (
    execute_full_replace,
    execute_plan,
    execute_preserve_positions,
    last_inserted_id,
    remote_step,
)
from .planner import (
    CHILD_PAGES_REORDERED,
    CHILD_PAGE_MOVED,
    LEADING_CHILD_PAGE_MOVED,
    NO_ANCHOR_MARKERS,
    NO_CHILD_PAGES,
    NO_PLACEHOLDER_BLOCK,
    moved_page_notice,
    plan_push,
)

__all__ = [
    "CHILD_PAGES_REORDERED",
    "CHILD_PAGE_MOVED",
    "LEADING_CHILD_PAGE_MOVED",
    "NO_ANCHOR_MARKERS",
    "NO_CHILD_PAGES",
    "NO_PLACEHOLDER_BLOCK",
    "execute_full_replace",
    "execute_plan",
    "execute_preserve_positions",
    "last_inserted_id",
    "moved_page_notice",
    "plan_push",
    "remote_step",
]
