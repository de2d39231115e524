"""Choose how a local document is written back to its page.

:func:`plan_push` is a pure function of the local blocks and the page's
current block records.  It returns one of two plans:

* :class:`FullReplace`: erase the page, append everything, restore the
  child pages afterwards (they end up at the bottom);
* :class:`PreservePositions`: keep the child pages where they are and
  rebuild the content around them.

The second plan needs child-page anchors in the local document and an
existing block to splice around.  Without either, or when keeping the
positions would reorder local content, the push degrades to the first.

Child pages nested inside other blocks (a toggle, a column) cannot keep
their place under either plan: the block that holds them is rewritten.
Both plans move them back under the page and say so in their warnings.
"""

from __future__ import annotations

from typing import Any

from notionsync.converter.payload import PLACEHOLDER_TYPES
from notionsync.converter.remote import CHILD_PAGE, nested_child_pages
from notionsync.models import (
    Block,
    ChildPageAnchor,
    FullReplace,
    Paragraph,
    PreservePositions,
    Section,
    SyncWarning,
    TextSpan,
)
from notionsync.utils.ids import normalize_id

NO_CHILD_PAGES = "no_child_pages"
NO_ANCHOR_MARKERS = "no_anchor_markers"
NO_PLACEHOLDER_BLOCK = "no_placeholder_block"
LEADING_CHILD_PAGE_MOVED = "leading_child_page_moved"
CHILD_PAGES_REORDERED = "child_pages_reordered"

CHILD_PAGE_MOVED = "CHILD_PAGE_MOVED"


def moved_page_notice(title: str) -> Paragraph:
    """The paragraph left where a child page had to be moved from."""
    text = (
        f'⚠️ Child page "{title}" could not keep its position and '
        "was moved to the end of this page."
    )
    return Paragraph((TextSpan(text),))


def _content_only(blocks: list[Block]) -> list[Block]:
    return [block for block in blocks if not isinstance(block, ChildPageAnchor)]


def _remote_children(records: list[dict[str, Any]]) -> dict[str, tuple[int, str]]:
    """``id -> (position, title)`` for every top-level child page."""
    children: dict[str, tuple[int, str]] = {}
    for index, record in enumerate(records):
        if record.get("type") == CHILD_PAGE:
            title = (record.get(CHILD_PAGE) or {}).get("title", "")
            children[normalize_id(record.get("id", ""))] = (index, title)
    return children


def _find_placeholder(records: list[dict[str, Any]]) -> int | None:
    for index, record in enumerate(records):
        if record.get("type") in PLACEHOLDER_TYPES:
            return index
    return None


def _leading_moved(
    blocks: list[Block], leading: set[str]
) -> list[str]:
    """Leading child pages whose local anchor comes after ordinary content."""
    moved: list[str] = []
    seen_content = False
    for block in blocks:
        if isinstance(block, ChildPageAnchor):
            if block.page_id in leading and seen_content and block.page_id not in moved:
                moved.append(block.page_id)
        else:
            seen_content = True
    return moved


def _out_of_order(
    blocks: list[Block], children: dict[str, tuple[int, str]]
) -> list[str]:
    """Anchors that come before a page they follow on the remote side."""
    moved: list[str] = []
    seen: set[str] = set()
    highest = -1
    for block in blocks:
        if not isinstance(block, ChildPageAnchor) or block.page_id not in children:
            continue
        if block.page_id in seen:
            continue
        seen.add(block.page_id)
        index = children[block.page_id][0]
        if index < highest:
            moved.append(block.page_id)
        else:
            highest = index
    return moved


def _moved_warning(title: str, page_id: str, where: str = "") -> SyncWarning:
    return SyncWarning(
        code=CHILD_PAGE_MOVED,
        message=f'Child page "{title}"{where} will move to the end of the page',
        context={"page_id": page_id},
    )


def _with_notices(
    local_blocks: list[Block],
    moved: list[str],
    children: dict[str, tuple[int, str]],
) -> tuple[list[Block], list[SyncWarning]]:
    """Swap the anchors of *moved* pages for notices; drop the other anchors."""
    blocks: list[Block] = []
    warnings: list[SyncWarning] = []
    noticed: set[str] = set()
    for block in local_blocks:
        if not isinstance(block, ChildPageAnchor):
            blocks.append(block)
        elif block.page_id in moved and block.page_id not in noticed:
            noticed.add(block.page_id)
            title = children[block.page_id][1] or block.title or block.page_id
            blocks.append(moved_page_notice(title))
            warnings.append(_moved_warning(title, block.page_id))
    return blocks, warnings


def plan_push(
    local_blocks: list[Block], remote_records: list[dict[str, Any]]
) -> FullReplace | PreservePositions:
    """Decide how to push *local_blocks* onto a page.

    Parameters
    ----------
    local_blocks:
        Decoded body of the local document, anchors included.
    remote_records:
        The page's current block records, in order.  Descendants fetched
        with :meth:`~notionsync.notion_api.blocks.BlockAPI.get_tree` are
        searched for nested child pages.

    Returns
    -------
    FullReplace | PreservePositions
        The plan.  A :class:`FullReplace` carries the reason it was chosen
        and restores every child page found in *remote_records*.
    """
    children = _remote_children(remote_records)
    nested = nested_child_pages(remote_records)
    nested_ids = [page_id for page_id, _ in nested if page_id not in children]
    nested_warnings = [
        _moved_warning(title or page_id, page_id, " sits inside another block and")
        for page_id, title in nested
        if page_id in nested_ids
    ]
    restore_ids = list(children) + nested_ids

    def full_replace(
        blocks: list[Block], reason: str, warnings: list[SyncWarning] | None = None
    ) -> FullReplace:
        return FullReplace(
            blocks,
            restore_ids,
            reason,
            list(warnings or []) + nested_warnings,
            reparent_ids=list(nested_ids),
        )

    if not children:
        return full_replace(_content_only(local_blocks), NO_CHILD_PAGES)

    anchored = [
        block
        for block in local_blocks
        if isinstance(block, ChildPageAnchor) and block.page_id in children
    ]
    if not anchored:
        return full_replace(_content_only(local_blocks), NO_ANCHOR_MARKERS)

    placeholder = _find_placeholder(remote_records)
    if placeholder is None:
        return full_replace(_content_only(local_blocks), NO_PLACEHOLDER_BLOCK)

    leading = {page_id for page_id, (index, _) in children.items() if index < placeholder}
    moved = _leading_moved(local_blocks, leading)
    if moved:
        blocks, warnings = _with_notices(local_blocks, moved, children)
        return full_replace(blocks, LEADING_CHILD_PAGE_MOVED, warnings)

    moved = _out_of_order(local_blocks, children)
    if moved:
        blocks, warnings = _with_notices(local_blocks, moved, children)
        return full_replace(blocks, CHILD_PAGES_REORDERED, warnings)

    anchor = remote_records[placeholder]
    sections = [Section(None)]
    used: set[str] = set()
    for block in local_blocks:
        if isinstance(block, ChildPageAnchor):
            if block.page_id in children and block.page_id not in used:
                used.add(block.page_id)
                sections.append(Section(block.page_id))
            continue
        sections[-1].blocks.append(block)

    delete_ids = [
        record["id"]
        for index, record in enumerate(remote_records)
        if index != placeholder and record.get("type") != CHILD_PAGE and "id" in record
    ]
    return PreservePositions(
        anchor_id=anchor["id"],
        anchor_type=anchor.get("type", ""),
        sections=sections,
        delete_ids=delete_ids,
        reparent_ids=list(nested_ids),
        warnings=list(nested_warnings),
    )
