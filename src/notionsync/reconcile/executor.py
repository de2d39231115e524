"""Carry out a push plan against the Notion API.

Each remote call is one named step.  When a call fails the run stops and
the failure is re-raised as :class:`NotionSyncStepError` naming the step;
calls that already succeeded are not undone.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from notionsync.config import NotionSyncConfig
from notionsync.converter.payload import blocks_to_payloads, placeholder_payload
from notionsync.errors import NotionSyncError, NotionSyncStepError
from notionsync.models import FullReplace, PreservePositions, PushResult, StrategyType
from notionsync.notion_api.blocks import extract_block_ids
from notionsync.observability import get_logger, log_event, resolve_metrics
from notionsync.utils.chunk import chunk_blocks
from notionsync.utils.ids import normalize_id

log = get_logger("notionsync.reconcile")

STEP_ERASE = "erase_content"
STEP_APPEND = "append_children"
STEP_RESTORE = "restore_child_page"
STEP_BLANK = "blank_placeholder"
STEP_DELETE = "delete_block"
STEP_INSERT = "insert_section"
STEP_DELETE_PLACEHOLDER = "delete_placeholder"


@contextmanager
def remote_step(name: str, page_id: str, **context: Any) -> Iterator[None]:
    """Re-raise API failures inside the block as :class:`NotionSyncStepError`."""
    try:
        yield
    except NotionSyncError as exc:
        log_event(
            log, logging.ERROR, "remote_step_failed",
            step=name, page_id=page_id, error_code=exc.code, **context,
        )
        raise NotionSyncStepError(
            message=f"Sync of page {page_id} failed at step {name}: {exc.message}",
            context={"step": name, "page_id": page_id, **context},
            cause=exc,
        ) from exc


def last_inserted_id(response: dict[str, Any], after: str, count: int) -> str:
    """Id of the last block created by an insert of *count* blocks after *after*.

    Notion may answer with only the new blocks or with a window of the
    parent's children; in the latter case the new blocks follow *after*.
    """
    ids = extract_block_ids(response)
    if not ids:
        return after
    if len(ids) == count:
        return ids[-1]
    normalized = [normalize_id(block_id) for block_id in ids]
    target = normalize_id(after)
    if target in normalized:
        position = normalized.index(target) + count
        if position < len(ids):
            return ids[position]
    return ids[-1]


class _Pacer:
    """Sleeps between consecutive append calls."""

    __slots__ = ("calls", "delay")

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self.calls = 0

    def wait(self) -> None:
        if self.calls and self.delay > 0:
            time.sleep(self.delay)
        self.calls += 1


# ---------------------------------------------------------------------------
# Full replace
# ---------------------------------------------------------------------------

def execute_full_replace(
    plan: FullReplace,
    page_id: str,
    blocks_api: Any,
    pages_api: Any,
    config: NotionSyncConfig,
) -> PushResult:
    """Erase *page_id*, append the plan's blocks, then restore child pages.

    Child pages that sat inside another block are always moved back under
    *page_id*, whatever the configured restore mode.

    Parameters
    ----------
    plan:
        The plan from :func:`plan_push`.
    page_id:
        Page being written.
    blocks_api:
        A :class:`~notionsync.notion_api.BlockAPI`.
    pages_api:
        A :class:`~notionsync.notion_api.PageAPI`.
    config:
        Batch size, pacing and restore mode.

    Returns
    -------
    PushResult

    Raises
    ------
    NotionSyncStepError
        When any call fails.
    """
    metrics = resolve_metrics(config.metrics)
    payloads = blocks_to_payloads(plan.blocks)
    batches = chunk_blocks(payloads, config.append_batch_size)

    with remote_step(STEP_ERASE, page_id):
        pages_api.erase_content(page_id)

    pacer = _Pacer(config.append_delay_seconds)
    for index, batch in enumerate(batches):
        pacer.wait()
        with remote_step(STEP_APPEND, page_id, batch=index, batches=len(batches)):
            blocks_api.append_children(page_id, batch)
        metrics.increment("notionsync.blocks_appended_total", len(batch))

    reparent = set(plan.reparent_ids)
    for child_id in plan.restore_ids:
        mode = "reparent" if child_id in reparent else config.restore_mode
        with remote_step(STEP_RESTORE, page_id, child_page_id=child_id, mode=mode):
            if mode == "reparent":
                pages_api.set_parent(child_id, page_id)
            else:
                pages_api.set_archived(child_id, False)

    log_event(
        log, logging.INFO, "push_complete",
        page_id=page_id, strategy=StrategyType.FULL_REPLACE.value,
        blocks_written=len(payloads), child_pages_restored=len(plan.restore_ids),
    )
    return PushResult(
        page_id=page_id,
        strategy_used=StrategyType.FULL_REPLACE,
        fallback_reason=plan.reason if plan.is_fallback else None,
        blocks_written=len(payloads),
        child_pages_restored=len(plan.restore_ids),
        warnings=list(plan.warnings),
    )


# ---------------------------------------------------------------------------
# Position-preserving edit
# ---------------------------------------------------------------------------

def execute_preserve_positions(
    plan: PreservePositions,
    page_id: str,
    blocks_api: Any,
    config: NotionSyncConfig,
    pages_api: Any = None,
) -> PushResult:
    """Rebuild the page content around its child pages.

    The placeholder block is blanked and kept as the insertion point of the
    leading section until every section is in place, then deleted.  Child
    pages that lived inside a deleted block are then moved back under
    *page_id* through *pages_api*, which is required when the plan has
    any ``reparent_ids``.

    Raises
    ------
    NotionSyncStepError
        When any call fails.
    """
    metrics = resolve_metrics(config.metrics)

    blank = placeholder_payload(plan.anchor_type)
    if blank is not None:
        with remote_step(STEP_BLANK, page_id, block_id=plan.anchor_id):
            blocks_api.update(plan.anchor_id, blank)

    for block_id in plan.delete_ids:
        with remote_step(STEP_DELETE, page_id, block_id=block_id):
            blocks_api.delete(block_id)

    written = 0
    pacer = _Pacer(config.append_delay_seconds)
    for section_index, section in enumerate(plan.sections):
        payloads = blocks_to_payloads(section.blocks)
        after = section.after_id or plan.anchor_id
        for batch in chunk_blocks(payloads, config.append_batch_size):
            pacer.wait()
            with remote_step(STEP_INSERT, page_id, section=section_index, after=after):
                response = blocks_api.append_children(page_id, batch, after=after)
            after = last_inserted_id(response, after, len(batch))
            written += len(batch)
            metrics.increment("notionsync.blocks_appended_total", len(batch))

    with remote_step(STEP_DELETE_PLACEHOLDER, page_id, block_id=plan.anchor_id):
        blocks_api.delete(plan.anchor_id)

    for child_id in plan.reparent_ids:
        with remote_step(STEP_RESTORE, page_id, child_page_id=child_id, mode="reparent"):
            pages_api.set_parent(child_id, page_id)

    log_event(
        log, logging.INFO, "push_complete",
        page_id=page_id, strategy=StrategyType.PRESERVE_POSITIONS.value,
        blocks_written=written, blocks_deleted=len(plan.delete_ids) + 1,
        child_pages_restored=len(plan.reparent_ids),
    )
    return PushResult(
        page_id=page_id,
        strategy_used=StrategyType.PRESERVE_POSITIONS,
        blocks_written=written,
        blocks_deleted=len(plan.delete_ids) + 1,
        child_pages_restored=len(plan.reparent_ids),
        warnings=list(plan.warnings),
    )


def execute_plan(
    plan: FullReplace | PreservePositions,
    page_id: str,
    blocks_api: Any,
    pages_api: Any,
    config: NotionSyncConfig,
) -> PushResult:
    """Run *plan* with the matching executor.

    A full replace chosen as a fallback is logged at ``WARNING`` as
    ``strategy_fallback``; it is not an error.
    """
    metrics = resolve_metrics(config.metrics)
    metrics.increment("notionsync.push_total", tags={"strategy": plan.strategy.value})

    if isinstance(plan, PreservePositions):
        if plan.warnings:
            log_event(
                log, logging.WARNING, "nested_child_pages_moved",
                page_id=page_id,
                moved_child_pages=[w.context.get("page_id") for w in plan.warnings],
            )
        return execute_preserve_positions(plan, page_id, blocks_api, config, pages_api)

    if plan.is_fallback:
        metrics.increment("notionsync.strategy_fallback_total", tags={"reason": plan.reason})
        log_event(
            log, logging.WARNING, "strategy_fallback",
            page_id=page_id, reason=plan.reason,
            moved_child_pages=[w.context.get("page_id") for w in plan.warnings],
        )
    return execute_full_replace(plan, page_id, blocks_api, pages_api, config)
