"""Exception types shared by the storage proxy and the editor components."""
from __future__ import annotations


class DocumentStoreError(Exception):
    """Base class for document storage failures."""


class DocumentNotFoundError(DocumentStoreError):
    """Raised when no blob exists for the requested document."""

    def __init__(self, name: str):
        super().__init__(f"Document '{name}' was not found")
        self.name = name


class UnsupportedFormatError(DocumentStoreError):
    """Raised for file extensions the editor cannot handle."""

    def __init__(self, extension: str | None):
        super().__init__("The document editor does not support this file format.")
        self.extension = extension


class StorageUnavailableError(DocumentStoreError):
    """Transient failure talking to the blob store (network, auth, config)."""


class DocumentConversionError(DocumentStoreError):
    """Raised when stored bytes cannot be turned into an editor document."""


class DuplicateNameError(DocumentStoreError):
    """Raised when a new document would reuse an existing name."""

    def __init__(self, name: str):
        super().__init__("Document already exists. Please choose a different name.")
        self.name = name


class StorageClientError(DocumentStoreError):
    """Raised by the HTTP storage client for transport errors and non-2xx replies."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    "DocumentConversionError",
    "DocumentNotFoundError",
    "DocumentStoreError",
    "DuplicateNameError",
    "StorageClientError",
    "StorageUnavailableError",
    "UnsupportedFormatError",
]
