"""Synchronous client: pull, push and diff Notion pages as Markdown files.

Usage::

    from notionsync import NotionSyncClient

    with NotionSyncClient.from_env() as client:
        pulled = client.pull("1f2e3d4c5b6a79801a2b3c4d5e6f7a8b", "notes")
        # ... edit pulled.file_path ...
        print(client.diff(pulled.file_path).text)
        client.push(pulled.file_path)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from notionsync.cache import UserNameCache
from notionsync.config import NotionSyncConfig, load_token
from notionsync.converter.blocks import encode_blocks
from notionsync.converter.inline import decode_inline
from notionsync.converter.remote import (
    blocks_from_remote,
    child_pages,
    classify_trailing,
    comments_from_remote,
)
from notionsync.diff import canonicalize, diff_lines, render_diff
from notionsync.document import format_comment, parse_document, render_document, sanitize_filename
from notionsync.errors import NotionSyncError, NotionSyncIdentityError
from notionsync.models import (
    Block,
    Divider,
    Document,
    DiffResult,
    Heading,
    PullResult,
    PushResult,
    QueryResult,
    Quote,
    SchemaProperty,
    TextSpan,
)
from notionsync.notion_api import (
    BlockAPI,
    CommentAPI,
    DatabaseAPI,
    NotionTransport,
    PageAPI,
    UserAPI,
    page_title,
)
from notionsync.observability import get_logger, log_event
from notionsync.query import clamp_limit, flatten_page, schema_from_database
from notionsync.reconcile import execute_plan, plan_push, remote_step
from notionsync.utils.ids import normalize_id

log = get_logger("notionsync.client")

STEP_FETCH_BLOCKS = "fetch_blocks"
STEP_FETCH_SCHEMA = "fetch_schema"
STEP_QUERY = "query_database"


class NotionSyncClient:
    """Keeps Markdown files and Notion pages in step.

    Parameters
    ----------
    token:
        Notion integration token.
    **kwargs:
        Any other :class:`NotionSyncConfig` field.
    """

    def __init__(self, token: str, **kwargs: Any) -> None:
        self._config = NotionSyncConfig(token=token, **kwargs)
        self._transport = NotionTransport(self._config)
        self._blocks = BlockAPI(self._transport)
        self._pages = PageAPI(self._transport)
        self._comments = CommentAPI(self._transport)
        self._users = UserAPI(self._transport)
        self._databases = DatabaseAPI(self._transport)
        self._names = UserNameCache(self._users.display_name)

    @classmethod
    def from_env(cls, env_file: str | Path = ".env", **kwargs: Any) -> NotionSyncClient:
        """Build a client with the token from ``NOTION_API_KEY`` or *env_file*.

        Raises
        ------
        NotionSyncConfigError
            If no token can be found.
        """
        return cls(load_token(env_file), **kwargs)

    # ------------------------------------------------------------------
    # Pull
    # ------------------------------------------------------------------

    def pull(self, page_id: str, output_dir: str | Path | None = None) -> PullResult:
        """Write page *page_id* to ``<output_dir>/<title>.md``.

        Child pages between content blocks become anchor lines; those after
        the last content block are only listed in the header.  Page
        comments are appended as a ``## Comments`` section.

        Parameters
        ----------
        page_id:
            Page id, dashed or not, or a page URL.
        output_dir:
            Target directory, created if missing.  Defaults to
            ``config.default_output_dir``.

        Raises
        ------
        NotionSyncStepError
            If the page content cannot be fetched.
        """
        pid = normalize_id(page_id)
        title = self._fetch_title(pid)

        with remote_step(STEP_FETCH_BLOCKS, pid):
            records = self._blocks.get_tree(pid)

        trailing = classify_trailing(records)
        document = Document(
            remote_id=pid,
            title=title,
            pulled_at=datetime.now(timezone.utc).replace(microsecond=0),
            child_page_ids=[child_id for child_id, _ in child_pages(records, nested=True)],
            blocks=blocks_from_remote(records, trailing),
            comments=self._fetch_comments(pid, records),
        )
        markdown = render_document(document)

        directory = Path(output_dir or self._config.default_output_dir)
        directory.mkdir(parents=True, exist_ok=True)
        file_path = directory / f"{sanitize_filename(title)}.md"
        file_path.write_text(markdown, encoding="utf-8")

        log_event(
            log, logging.INFO, "pull_complete",
            page_id=pid, file_path=str(file_path), blocks=len(document.blocks),
            child_pages=len(document.child_page_ids), trailing_child_pages=len(trailing),
            comments=len(document.comments),
        )
        return PullResult(document=document, file_path=str(file_path), markdown=markdown)

    def _fetch_title(self, page_id: str) -> str:
        try:
            title = page_title(self._pages.retrieve(page_id))
        except NotionSyncError as exc:
            log_event(
                log, logging.WARNING, "title_fetch_failed",
                page_id=page_id, error_code=exc.code,
            )
            return page_id
        return title or page_id

    def _fetch_comments(self, page_id: str, records: list[dict[str, Any]]) -> list:
        try:
            raw = self._comments.list(page_id)
        except NotionSyncError as exc:
            log_event(
                log, logging.WARNING, "comments_fetch_failed",
                page_id=page_id, error_code=exc.code,
            )
            return []
        block_ids = [record["id"] for record in records if "id" in record]
        return comments_from_remote(raw, self._names.get, block_ids)

    # ------------------------------------------------------------------
    # Push
    # ------------------------------------------------------------------

    def push(self, file_path: str | Path) -> PushResult:
        """Write the local document at *file_path* back to its page.

        The comments section is not pushed unless
        ``config.push_comment_section`` is set, in which case it is added
        as plain blocks below a divider.

        Raises
        ------
        NotionSyncIdentityError
            If the file has no ``notion_id``.
        NotionSyncStepError
            If a remote call fails; earlier calls are not undone.
        """
        document = self._load(file_path)
        blocks: list[Block] = list(document.blocks)
        if self._config.push_comment_section and document.comments:
            blocks.extend(_comment_blocks(document))

        with remote_step(STEP_FETCH_BLOCKS, document.remote_id):
            records = self._blocks.get_tree(document.remote_id)

        plan = plan_push(blocks, records)
        return execute_plan(plan, document.remote_id, self._blocks, self._pages, self._config)

    # ------------------------------------------------------------------
    # Diff
    # ------------------------------------------------------------------

    def diff(self, file_path: str | Path) -> DiffResult:
        """Compare the local document with the current page content.

        Both sides are canonicalised and compared line by line by
        position.  The comments section and trailing child pages are left
        out of the comparison.

        Raises
        ------
        NotionSyncIdentityError
            If the file has no ``notion_id``.
        NotionSyncStepError
            If the page content cannot be fetched.
        """
        document = self._load(file_path)
        pid = document.remote_id

        with remote_step(STEP_FETCH_BLOCKS, pid):
            records = self._blocks.get_tree(pid)
        trailing = classify_trailing(records)

        remote = canonicalize(encode_blocks(blocks_from_remote(records, trailing)))
        local = canonicalize(encode_blocks(document.blocks, trailing))
        lines = diff_lines(local, remote)
        return DiffResult(page_id=pid, lines=lines, text=render_diff(str(file_path), pid, lines))

    # ------------------------------------------------------------------
    # Databases
    # ------------------------------------------------------------------

    def get_schema(self, database_id: str) -> list[SchemaProperty]:
        """Names and types of the properties of a database."""
        did = normalize_id(database_id)
        with remote_step(STEP_FETCH_SCHEMA, did):
            database = self._databases.retrieve(did)
        return schema_from_database(database)

    def query_database(
        self,
        database_id: str,
        filter: dict[str, Any] | None = None,
        sorts: list[dict[str, Any]] | None = None,
        limit: int | None = 100,
        start_cursor: str | None = None,
    ) -> QueryResult:
        """Query a database and flatten each row.

        Parameters
        ----------
        database_id:
            Database to query.
        filter, sorts:
            Passed to Notion unchanged.
        limit:
            Rows to return, clamped to ``1..100``.
        start_cursor:
            ``next_cursor`` of a previous result, to fetch the next page.
        """
        did = normalize_id(database_id)
        with remote_step(STEP_QUERY, did):
            raw = self._databases.query(
                did, filter=filter, sorts=sorts,
                page_size=clamp_limit(limit), start_cursor=start_cursor,
            )
        return QueryResult(
            results=[flatten_page(page, self._names.get) for page in raw.get("results", [])],
            has_more=bool(raw.get("has_more")),
            next_cursor=raw.get("next_cursor"),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _load(self, file_path: str | Path) -> Document:
        text = Path(file_path).read_text(encoding="utf-8")
        document = parse_document(text)
        if not document.remote_id:
            raise NotionSyncIdentityError(
                message=f"No notion_id found in the header of {file_path}",
                context={"file_path": str(file_path)},
            )
        return document

    def close(self) -> None:
        """Release the HTTP connection pool."""
        self._transport.close()

    def __enter__(self) -> NotionSyncClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def _comment_blocks(document: Document) -> list[Block]:
    """Blocks that reproduce the local comments section on the page."""
    blocks: list[Block] = [Divider(), Heading(2, (TextSpan("Comments"),))]
    for comment in document.comments:
        blocks.append(Quote(tuple(decode_inline(format_comment(comment)[2:]))))
    return blocks
