# src/ontask/core/errors.py

from __future__ import annotations


class OnTaskError(Exception):
    """Base class for all ontask errors."""


class DocumentStoreError(OnTaskError):
    """A document could not be served by the store."""

    def __init__(self, document_id: str, message: str | None = None) -> None:
        self.document_id = document_id
        super().__init__(message or f"document error: {document_id}")


class DocumentNotFound(DocumentStoreError):
    def __init__(self, document_id: str, message: str | None = None) -> None:
        super().__init__(document_id, message or f"document not found: {document_id}")


class DocumentReadError(DocumentStoreError):
    def __init__(self, document_id: str, message: str | None = None) -> None:
        super().__init__(document_id, message or f"failed to read document: {document_id}")


class ScanSessionError(OnTaskError):
    """
    Caller broke the scan session contract.

    Raised for fetch before initialize_scan, fetch after reset_scan, and
    overlapping calls on one session. This is a programming error, not a data error.
    """


class ConfigError(OnTaskError):
    """Malformed configuration file or tier definition."""
