# src/ontask/tasks/aggregator.py

from __future__ import annotations

"""
Document source aggregator.

Unions document ids from every origin, drops duplicates, optionally keeps only
current-period documents, then sorts by file name Z-A (directory ignored).
"""

import logging
from collections.abc import Sequence

from ..core.ports import DocumentSource
from .sources import file_name, is_current_period
from .task_models import ScanScope

logger = logging.getLogger(__name__)


class DocumentAggregator:
    def __init__(self, sources: Sequence[DocumentSource]) -> None:
        self._sources = list(sources)

    @property
    def sources(self) -> list[DocumentSource]:
        return list(self._sources)

    async def list_documents(self, scope: ScanScope | None = None) -> list[str]:
        scope = scope or ScanScope()

        seen: set[str] = set()
        union: list[str] = []
        for source in self._sources:
            source_name = getattr(source, "name", type(source).__name__)
            try:
                ids = await source.list_documents()
            except Exception:
                # One broken origin must not take the whole listing down.
                logger.warning("Document source %s failed; skipping", source_name, exc_info=True)
                continue

            added = 0
            for doc_id in ids:
                if doc_id in seen:
                    continue
                seen.add(doc_id)
                union.append(doc_id)
                added += 1
            logger.debug("Source %s: %d ids (%d new)", source_name, len(ids), added)

        if scope.only_current_period:
            union = [d for d in union if is_current_period(d, scope.today)]

        # sorted() is stable: equal file names keep union order.
        ordered = sorted(union, key=file_name, reverse=True)
        logger.info("Aggregated %d documents from %d sources", len(ordered), len(self._sources))
        return ordered
