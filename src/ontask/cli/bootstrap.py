# src/ontask/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the document store, sources, scanner, ranker and controller into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import DocumentStore
from ..core.state import AppState
from ..storage.vault import VaultDocumentStore
from ..tasks.aggregator import DocumentAggregator
from ..tasks.ranker import TaskRanker
from ..tasks.scanner import TaskScanner
from ..tasks.sources import build_sources
from ..tasks.task_view import TaskListController

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, store: DocumentStore | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the store) injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if store is None:
        store = VaultDocumentStore(settings.vault_root)

    sources = build_sources(store, settings)
    logger.info("Document sources: %s", ", ".join(s.name for s in sources) or "(none)")

    scanner = TaskScanner(store, DocumentAggregator(sources))
    ranker = TaskRanker(store, settings.top_task_tiers)
    controller = TaskListController(scanner, ranker, settings)

    return AppState(
        settings=settings,
        store=store,
        scanner=scanner,
        ranker=ranker,
        controller=controller,
    )
