# src/ontask/tasks/ranker.py

from __future__ import annotations

"""
Top task ranking.

Tiers are walked in ascending priority. Every task whose status matches a tier
gets that tier's rank label; the first tier with any match supplies the top
task, which is the one from the most recently modified document.

Inputs are never mutated: rank() returns a fresh RankingResult snapshot.
Subscribers are told about the outcome through TopTaskObserver.
"""

import logging
from collections.abc import Callable, Iterable, Sequence

from ..core.ports import DocumentStore, TopTaskObserver
from .task_models import DEFAULT_RANK_TIERS, RankedTask, RankingResult, RankTier, TaskLine

logger = logging.getLogger(__name__)


class TaskRanker:
    def __init__(
            self,
            store: DocumentStore,
            tiers: Sequence[RankTier] = DEFAULT_RANK_TIERS,
    ) -> None:
        self._store = store
        self._tiers = tuple(tiers)
        self._observers: list[TopTaskObserver] = []
        self._last_result: RankingResult | None = None

    @property
    def tiers(self) -> tuple[RankTier, ...]:
        return self._tiers

    @property
    def last_result(self) -> RankingResult | None:
        return self._last_result

    def subscribe(self, observer: TopTaskObserver) -> Callable[[], None]:
        """Register an observer. Returns a callable that unsubscribes it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    async def _recency_map(self, tasks: Iterable[TaskLine]) -> dict[str, float]:
        out: dict[str, float] = {}
        for task in tasks:
            doc_id = task.document_id
            if doc_id in out:
                continue
            try:
                out[doc_id] = float(await self._store.get_document_recency(doc_id))
            except Exception:
                logger.warning("Recency lookup failed for %s; treating as oldest", doc_id, exc_info=True)
                out[doc_id] = 0.0
        return out

    async def rank(
            self,
            tasks: Sequence[TaskLine],
            tiers: Sequence[RankTier] | None = None,
    ) -> RankingResult:
        tiers_sorted = sorted(self._tiers if tiers is None else tiers, key=lambda t: t.priority)

        ranks: list[int | None] = [None] * len(tasks)
        winner: int | None = None
        counts: dict[str, int] = {}

        recency: dict[str, float] = {}
        for tier in tiers_sorted:
            idxs = [i for i, t in enumerate(tasks) if t.status_symbol == tier.status_symbol]
            counts[tier.name or tier.status_symbol] = len(idxs)
            if not idxs:
                continue

            for i in idxs:
                if ranks[i] is None:
                    ranks[i] = tier.priority

            if winner is None:
                if not recency:
                    recency = await self._recency_map(tasks)
                # sorted() is stable: equal timestamps keep load order.
                by_recency = sorted(idxs, key=lambda i: recency.get(tasks[i].document_id, 0.0), reverse=True)
                winner = by_recency[0]
                logger.debug("Tier %s supplies the top task: %s", tier.name or tier.status_symbol, tasks[winner].raw_line)

        logger.debug("Tier matches: %s", counts)

        ranked = tuple(
            RankedTask(task=t, rank=ranks[i], is_top=(i == winner)) for i, t in enumerate(tasks)
        )
        top = ranked[winner] if winner is not None else None
        result = RankingResult(ranked_tasks=ranked, top_task=top)
        self._last_result = result

        self._notify(result)
        return result

    def _notify(self, result: RankingResult) -> None:
        top = result.top_task
        if top is not None:
            logger.info("Top task: %s (%s:%d)", top.raw_line, top.document_id, top.line_number)
        else:
            logger.info("No top task among %d loaded tasks", len(result.ranked_tasks))

        for observer in list(self._observers):
            try:
                if top is not None:
                    observer.on_top_task_found(top)
                else:
                    observer.on_top_task_cleared()
            except Exception:
                logger.exception("Top task observer %r failed", observer)
