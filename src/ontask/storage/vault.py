# src/ontask/storage/vault.py

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from ..core.errors import DocumentNotFound, DocumentReadError, DocumentStoreError

logger = logging.getLogger(__name__)


class VaultDocumentStore:
    """
    Filesystem-backed document store.

    Document ids are POSIX paths relative to the vault root ("daily/2024-01-15.md").
    Blocking file IO runs in a worker thread so the event loop stays free.
    Contents are never cached: every read hits the disk.
    """

    def __init__(self, root: str | Path, *, suffix: str = ".md") -> None:
        self._root = Path(root).expanduser().resolve()
        self._suffix = suffix
        logger.info("VaultDocumentStore ready root=%s", self._root)

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, document_id: str) -> Path:
        rel = document_id.strip().strip("/")
        try:
            candidate = (self._root / rel).resolve()
        except (OSError, RuntimeError) as e:
            # Symlink loops: RuntimeError up to 3.12, OSError after.
            raise DocumentReadError(document_id, f"cannot resolve {document_id}: {e}") from e
        if candidate != self._root and self._root not in candidate.parents:
            raise DocumentNotFound(document_id, f"document outside vault: {document_id}")
        return candidate

    def _exists_sync(self, path: str) -> bool:
        try:
            return self._resolve(path).exists()
        except DocumentStoreError:
            return False

    def _is_file_sync(self, path: str) -> bool:
        try:
            return self._resolve(path).is_file()
        except DocumentStoreError:
            return False

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._exists_sync, path)

    async def is_file(self, path: str) -> bool:
        return await asyncio.to_thread(self._is_file_sync, path)

    def _list_sync(self) -> list[str]:
        out: list[str] = []
        for dirpath, dirnames, filenames in os.walk(self._root):
            # Hidden folders (.git, .obsidian, ...) are not notes.
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            for name in sorted(filenames):
                if not name.endswith(self._suffix):
                    continue
                full = Path(dirpath) / name
                out.append(full.relative_to(self._root).as_posix())
        return out

    async def list_markdown_documents(self) -> list[str]:
        return await asyncio.to_thread(self._list_sync)

    def _read_sync(self, document_id: str) -> str:
        path = self._resolve(document_id)
        if not path.is_file():
            raise DocumentNotFound(document_id)
        try:
            return path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadError(document_id, f"failed to read {document_id}: {e}") from e

    async def read_document(self, document_id: str) -> str:
        return await asyncio.to_thread(self._read_sync, document_id)

    def _recency_sync(self, document_id: str) -> float:
        path = self._resolve(document_id)
        try:
            return path.stat().st_mtime
        except FileNotFoundError as e:
            raise DocumentNotFound(document_id) from e
        except OSError as e:
            raise DocumentReadError(document_id, f"failed to stat {document_id}: {e}") from e

    async def get_document_recency(self, document_id: str) -> float:
        return await asyncio.to_thread(self._recency_sync, document_id)
