# src/ontask/tasks/sources.py

from __future__ import annotations

"""
Document origins.

Each source answers "which documents should be scanned" for one kind of
collection. Sources never read document contents.
"""

import logging
import re
from datetime import date
from typing import Any

from ..core.ports import DocumentSource, DocumentStore

logger = logging.getLogger(__name__)

DAILY_NOTE_PATTERNS = (
    re.compile(r"\d{4}-\d{2}-\d{2}"),
    re.compile(r"\d{2}-\d{2}-\d{4}"),
    re.compile(r"\d{4}\d{2}\d{2}"),
)


def file_name(document_id: str) -> str:
    """Trailing path component ("a/b/2024-01-15.md" -> "2024-01-15.md")."""
    return document_id.rsplit("/", 1)[-1] or document_id


def _under_prefix(document_id: str, prefix: str) -> bool:
    prefix = prefix.strip("/")
    if not prefix:
        return True
    return document_id == prefix or document_id.startswith(prefix + "/")


def period_markers(today: date) -> list[str]:
    y = f"{today.year:04d}"
    m = f"{today.month:02d}"
    d = f"{today.day:02d}"
    return [
        f"{y}-{m}-{d}",
        f"{y}{m}{d}",
        f"{m}-{d}-{y}",
        f"{d}-{m}-{y}",
        f"{m}{d}{y}",
        f"{d}{m}{y}",
    ]


def is_current_period(document_id: str, today: date | None = None) -> bool:
    """True if today's date appears in the file name or the full path."""
    today = today or date.today()
    name = file_name(document_id).lower()
    path = document_id.lower()
    return any(marker in name or marker in path for marker in period_markers(today))


class StreamsSource:
    """
    Tagged collections ("streams").

    Each stream path is either a single document or a folder; a folder
    contributes every markdown document below it.
    """

    name = "streams"

    def __init__(self, store: DocumentStore, stream_paths: list[str]) -> None:
        self._store = store
        self._stream_paths = [p.strip().strip("/") for p in stream_paths if p and p.strip()]

    async def list_documents(self) -> list[str]:
        if not self._stream_paths:
            return []

        out: list[str] = []
        all_docs: list[str] | None = None
        for stream in self._stream_paths:
            if not await self._store.exists(stream):
                logger.debug("Stream path missing: %s", stream)
                continue
            if await self._store.is_file(stream):
                out.append(stream)
                continue
            if all_docs is None:
                all_docs = await self._store.list_markdown_documents()
            out.extend(doc for doc in all_docs if _under_prefix(doc, stream))
        return out


class DailyNotesSource:
    """Documents whose file name carries a date (2024-01-15, 01-15-2024, 20240115)."""

    name = "daily-notes"

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def list_documents(self) -> list[str]:
        docs = await self._store.list_markdown_documents()
        out: list[str] = []
        for doc in docs:
            name = file_name(doc).lower()
            if any(p.search(name) for p in DAILY_NOTE_PATTERNS):
                out.append(doc)
        return out


class FolderSource:
    """A designated subtree; direct children only when include_subfolders is off."""

    name = "folder"

    def __init__(self, store: DocumentStore, folder: str, *, include_subfolders: bool = True) -> None:
        self._store = store
        self._folder = folder.strip().strip("/")
        self._include_subfolders = include_subfolders

    async def list_documents(self) -> list[str]:
        if self._folder and not await self._store.exists(self._folder):
            return []
        if self._folder and await self._store.is_file(self._folder):
            return [self._folder]

        docs = await self._store.list_markdown_documents()
        out: list[str] = []
        for doc in docs:
            if not _under_prefix(doc, self._folder):
                continue
            if not self._include_subfolders:
                rel = doc[len(self._folder) + 1 :] if self._folder else doc
                if "/" in rel:
                    continue
            out.append(doc)
        return out


def build_sources(store: DocumentStore, settings: Any) -> list[DocumentSource]:
    """Origins enabled by settings (streams, daily notes, custom folder)."""
    sources: list[DocumentSource] = []

    streams = list(getattr(settings, "streams", []) or [])
    if streams:
        sources.append(StreamsSource(store, streams))

    if getattr(settings, "daily_notes_enabled", True):
        sources.append(DailyNotesSource(store))

    folder = str(getattr(settings, "custom_folder_path", "") or "").strip()
    if folder:
        sources.append(
            FolderSource(
                store,
                folder,
                include_subfolders=bool(getattr(settings, "include_subfolders", True)),
            )
        )

    return sources
