# src/ontask/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The scanner and ranker depend on Protocols instead of concrete implementations.
This keeps the document storage swappable (vault on disk, in-memory fakes in tests).
"""

from typing import TYPE_CHECKING, Awaitable, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import RankedTask


class DocumentStore(Protocol):
    """
    Host document storage.

    Document ids are path-like strings ("notes/2024-01-15.md").
    read_document raises DocumentNotFound / DocumentReadError (see core.errors).
    """

    def read_document(self, document_id: str) -> Awaitable[str]: ...

    def get_document_recency(self, document_id: str) -> Awaitable[float]: ...

    def list_markdown_documents(self) -> Awaitable[list[str]]: ...

    def exists(self, path: str) -> Awaitable[bool]: ...

    def is_file(self, path: str) -> Awaitable[bool]: ...


class DocumentSource(Protocol):
    """One origin of candidate documents (streams, daily notes, a folder)."""

    name: str

    def list_documents(self) -> Awaitable[list[str]]: ...


class TopTaskObserver(Protocol):
    """Subscriber notified by TaskRanker after every ranking pass."""

    def on_top_task_found(self, task: RankedTask) -> None: ...

    def on_top_task_cleared(self) -> None: ...
