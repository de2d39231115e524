"""Batching for ``append_children`` payloads."""

from __future__ import annotations

from typing import TypeVar

T = TypeVar("T")

MAX_APPEND_BATCH = 100
"""Largest number of children Notion accepts in one append call."""


def chunk_blocks(items: list[T], size: int = MAX_APPEND_BATCH) -> list[list[T]]:
    """Split *items* into consecutive batches of at most *size*.

    Parameters
    ----------
    items:
        Block payloads (or anything else) in insertion order.
    size:
        Batch size, between 1 and :data:`MAX_APPEND_BATCH`.

    Returns
    -------
    list[list]
        The batches, in order.  An empty input gives ``[]``.

    Raises
    ------
    ValueError
        If *size* is outside ``1..100``.
    """
    if not 1 <= size <= MAX_APPEND_BATCH:
        raise ValueError(f"size must be between 1 and {MAX_APPEND_BATCH}, got {size}")
    return [items[i : i + size] for i in range(0, len(items), size)]

