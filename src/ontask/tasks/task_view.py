# src/ontask/tasks/task_view.py

from __future__ import annotations

"""
Task list controller.

Caller-side coordination of one scan session:
- refresh(): reset + initialize + first page + ranking
- load_more(): next page appended to the working set + re-ranking

Calls are serialized here: an overlapping refresh is remembered and replayed once
after the running one finishes; an overlapping load_more is dropped.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .ranker import TaskRanker
from .scanner import TaskScanner
from .status_filter import StatusPredicate, compile_filter
from .task_models import RankingResult, ScanScope, TaskLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TaskListSnapshot:
    tasks: tuple[TaskLine, ...] = ()
    ranking: RankingResult = field(default_factory=lambda: RankingResult(ranked_tasks=(), top_task=None))
    has_more: bool = False


class TaskListController:
    def __init__(self, scanner: TaskScanner, ranker: TaskRanker, settings: Any) -> None:
        self._scanner = scanner
        self._ranker = ranker
        self._load_more_limit = max(1, int(getattr(settings, "load_more_limit", 10)))
        self._only_show_today = bool(getattr(settings, "only_show_today", False))
        self._status_filters: dict[str, bool] = dict(getattr(settings, "status_filters", {}) or {})
        self._predicate: StatusPredicate = compile_filter(self._status_filters)

        self._snapshot = TaskListSnapshot()
        self._refreshing = False
        self._refresh_pending = False

    # ---- read-only views ----

    @property
    def snapshot(self) -> TaskListSnapshot:
        return self._snapshot

    @property
    def status_filters(self) -> dict[str, bool]:
        return dict(self._status_filters)

    @property
    def only_show_today(self) -> bool:
        return self._only_show_today

    @property
    def load_more_limit(self) -> int:
        return self._load_more_limit

    @property
    def is_refreshing(self) -> bool:
        return self._refreshing

    # ---- operations ----

    async def refresh(self) -> TaskListSnapshot:
        if self._refreshing:
            logger.debug("Refresh already running; coalescing")
            self._refresh_pending = True
            return self._snapshot

        self._refreshing = True
        try:
            while True:
                self._refresh_pending = False
                await self._reload()
                if not self._refresh_pending:
                    break
                logger.debug("Running coalesced refresh")
        finally:
            self._refreshing = False
        return self._snapshot

    async def _reload(self) -> None:
        self._scanner.reset_scan()
        await self._scanner.initialize_scan(ScanScope(only_current_period=self._only_show_today))
        batch = await self._scanner.fetch_next_batch(self._load_more_limit, self._predicate)
        ranking = await self._ranker.rank(batch.tasks)
        self._snapshot = TaskListSnapshot(tasks=batch.tasks, ranking=ranking, has_more=batch.has_more)
        logger.info("Refreshed: %d tasks (has_more=%s)", len(batch.tasks), batch.has_more)

    async def load_more(self) -> TaskListSnapshot:
        if self._refreshing:
            logger.debug("load_more ignored while refreshing")
            return self._snapshot
        if not self._scanner.is_initialized:
            return await self.refresh()

        self._refreshing = True
        try:
            batch = await self._scanner.fetch_next_batch(self._load_more_limit, self._predicate)
            tasks = self._snapshot.tasks + batch.tasks
            ranking = await self._ranker.rank(tasks)
            self._snapshot = TaskListSnapshot(tasks=tasks, ranking=ranking, has_more=batch.has_more)
            logger.info("Loaded %d more tasks (total=%d, has_more=%s)", len(batch.tasks), len(tasks), batch.has_more)
        finally:
            self._refreshing = False

        if self._refresh_pending:
            return await self.refresh()
        return self._snapshot

    async def set_status_filters(self, filters: Mapping[str, bool]) -> TaskListSnapshot:
        self._status_filters = {str(k): v is True for k, v in filters.items()}
        self._predicate = compile_filter(self._status_filters)
        return await self.refresh()

    async def set_only_show_today(self, enabled: bool) -> TaskListSnapshot:
        self._only_show_today = bool(enabled)
        return await self.refresh()
