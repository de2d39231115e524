"""Shared test fixtures for the notionsync test suite."""

from __future__ import annotations

import json
import logging

import httpx
import pytest

from notionsync.config import NotionSyncConfig


def make_config(**overrides) -> NotionSyncConfig:
    """Return a NotionSyncConfig tuned for fast, deterministic tests."""
    defaults = dict(
        token="test-token-1234",
        retry_max_attempts=3,
        retry_base_delay=0.0,
        retry_max_delay=0.0,
        retry_jitter=False,
        rate_limit_rps=10_000.0,
        append_delay_seconds=0.0,
    )
    defaults.update(overrides)
    return NotionSyncConfig(**defaults)


def make_response(
    status_code: int = 200,
    body: dict | None = None,
    headers: dict | None = None,
) -> httpx.Response:
    """Build a minimal httpx.Response with a request attached."""
    content = json.dumps(body).encode() if body is not None else b""
    resp = httpx.Response(status_code, content=content, headers=headers or {})
    resp.request = httpx.Request("GET", "https://api.notion.com/v1/test")
    return resp


def rich(text: str, **annotations) -> list[dict]:
    """A one-segment rich_text array as Notion returns it."""
    segment = {"type": "text", "text": {"content": text}, "plain_text": text}
    if annotations:
        segment["annotations"] = annotations
    return [segment]


def record(block_type: str, block_id: str, text: str | None = None, **body) -> dict:
    """A block record as returned by ``GET /blocks/{id}/children``."""
    payload = dict(body)
    if text is not None:
        payload["rich_text"] = rich(text)
    return {"id": block_id, "type": block_type, "has_children": False, block_type: payload}


def child_page(page_id: str, title: str) -> dict:
    return {"id": page_id, "type": "child_page", "has_children": True,
            "child_page": {"title": title}}


@pytest.fixture
def config() -> NotionSyncConfig:
    """Default test configuration with a dummy token."""
    return make_config()


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def log_records():
    """Records emitted under the ``notionsync`` logger during the test."""
    logger = logging.getLogger("notionsync")
    handler = _ListHandler()
    previous = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield handler.records
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)
