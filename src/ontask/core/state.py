# src/ontask/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.ranker import TaskRanker
from ..tasks.scanner import TaskScanner
from ..tasks.task_view import TaskListController
from .ports import DocumentStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    store: DocumentStore
    scanner: TaskScanner
    ranker: TaskRanker
    controller: TaskListController
