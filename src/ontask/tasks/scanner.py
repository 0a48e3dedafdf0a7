# src/ontask/tasks/scanner.py

from __future__ import annotations

"""
Cursor-based task scanner.

A scan session owns a fixed, ordered document list and a ScanCursor.
Each fetch reads documents lazily, one at a time and in list order, and stops
as soon as the requested number of tasks is collected. The cursor remembers the
exact (document, match) position so the next fetch continues where this one
stopped: concatenated batches equal one unbounded scan.

has_more is conservative: it stays True until the last document's matches are
actually consumed by some fetch. There is no look-ahead.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence

from ..core.errors import DocumentStoreError, ScanSessionError
from ..core.ports import DocumentStore
from .aggregator import DocumentAggregator
from .status_filter import StatusPredicate, extract_matches
from .task_models import ScanBatch, ScanCursor, ScanScope, TaskLine

logger = logging.getLogger(__name__)

DocumentReader = Callable[[str], Awaitable[str]]


async def scan_documents(
        document_ids: Sequence[str],
        cursor: ScanCursor,
        target_count: int,
        predicate: StatusPredicate,
        read: DocumentReader,
) -> ScanBatch:
    """
    Collect up to target_count matching lines starting at cursor.

    Returns the batch together with the cursor to resume from. Unreadable
    documents are logged and skipped; they never fail the batch.
    """
    doc_count = len(document_ids)
    result: list[TaskLine] = []

    if target_count <= 0:
        return ScanBatch(tasks=(), has_more=cursor.document_index < doc_count, cursor=cursor)

    di = cursor.document_index
    next_cursor = cursor

    while di < doc_count and len(result) < target_count:
        doc_id = document_ids[di]
        start = cursor.match_index if di == cursor.document_index else 0

        try:
            text = await read(doc_id)
        except DocumentStoreError as e:
            logger.warning("Skipping document %s: %s", doc_id, e)
            di += 1
            next_cursor = ScanCursor(di, 0)
            continue

        matches = extract_matches(doc_id, text, predicate)

        consumed = 0
        for task in matches[start:]:
            result.append(task)
            consumed += 1
            if len(result) >= target_count:
                break

        if len(result) >= target_count and start + consumed < len(matches):
            # Mid-document stop: resume inside this document next time.
            next_cursor = ScanCursor(di, start + consumed)
            logger.debug(
                "Stopped in document %d/%d (%s) at match %d of %d",
                di + 1,
                doc_count,
                doc_id,
                next_cursor.match_index,
                len(matches),
            )
            return ScanBatch(tasks=tuple(result), has_more=True, cursor=next_cursor)

        di += 1
        next_cursor = ScanCursor(di, 0)
        logger.debug(
            "Document %d/%d (%s): %d matches, %d taken from offset %d, progress %d/%d",
            di,
            doc_count,
            doc_id,
            len(matches),
            consumed,
            start,
            len(result),
            target_count,
        )

    return ScanBatch(tasks=tuple(result), has_more=di < doc_count, cursor=next_cursor)


class TaskScanner:
    """
    One scan session over the aggregated document list.

    Usage:
        await scanner.initialize_scan(scope)
        batch = await scanner.fetch_next_batch(10, predicate)
        batch = await scanner.fetch_next_batch(10, predicate)  # continues

    Calls on one session must not overlap; an overlapping call raises
    ScanSessionError instead of corrupting the cursor.
    """

    def __init__(self, store: DocumentStore, aggregator: DocumentAggregator) -> None:
        self._store = store
        self._aggregator = aggregator
        self._document_ids: tuple[str, ...] = ()
        self._cursor = ScanCursor.start()
        self._initialized = False
        self._busy = False

    @property
    def cursor(self) -> ScanCursor:
        return self._cursor

    @property
    def document_ids(self) -> tuple[str, ...]:
        return self._document_ids

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _enter(self, op: str) -> None:
        if self._busy:
            raise ScanSessionError(f"{op} called while another scan call is in flight")
        self._busy = True

    async def initialize_scan(self, scope: ScanScope | None = None) -> None:
        """Rebuild the ordered document list and rewind the cursor to (0, 0)."""
        self._enter("initialize_scan")
        try:
            ids = await self._aggregator.list_documents(scope)
            self._document_ids = tuple(ids)
            self._cursor = ScanCursor.start()
            self._initialized = True
            logger.info("Scan initialized with %d documents", len(self._document_ids))
            if self._document_ids:
                logger.debug("First documents: %s", list(self._document_ids[:5]))
        finally:
            self._busy = False

    async def fetch_next_batch(self, target_count: int, predicate: StatusPredicate) -> ScanBatch:
        if not self._initialized:
            raise ScanSessionError("fetch_next_batch called before initialize_scan (or after reset_scan)")

        self._enter("fetch_next_batch")
        try:
            logger.debug(
                "Fetching %d tasks from document %d, match %d",
                target_count,
                self._cursor.document_index,
                self._cursor.match_index,
            )
            batch = await scan_documents(
                self._document_ids,
                self._cursor,
                target_count,
                predicate,
                self._store.read_document,
            )
            self._cursor = batch.cursor
            logger.info(
                "Fetched %d tasks (has_more=%s, cursor=%d/%d)",
                len(batch.tasks),
                batch.has_more,
                batch.cursor.document_index,
                batch.cursor.match_index,
            )
            return batch
        finally:
            self._busy = False

    def reset_scan(self) -> None:
        """Drop the session. fetch_next_batch fails until initialize_scan runs again."""
        if self._busy:
            raise ScanSessionError("reset_scan called while a scan call is in flight")
        self._document_ids = ()
        self._cursor = ScanCursor.start()
        self._initialized = False
        logger.debug("Scan reset")
