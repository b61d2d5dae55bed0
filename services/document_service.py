"""Storage proxy operations behind the document endpoints."""
from __future__ import annotations

import base64
import binascii
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any

import blob_storage
from document_codec import DOCX_CONTENT_TYPE, decode_document, dumps_document, text_to_document
from document_formats import FormatType, format_of, format_of_name
from errors import DocumentConversionError, DocumentNotFoundError, DocumentStoreError, UnsupportedFormatError

logger = logging.getLogger(__name__)

_FALLBACK_MEDIA_TYPE = "application/octet-stream"


@dataclass(slots=True)
class PersistResult:
    document_name: str
    object_name: str
    size: int


@dataclass(slots=True)
class DownloadedDocument:
    filename: str
    data: bytes
    media_type: str


def media_type_for(document_name: str) -> str:
    if PurePosixPath(document_name).suffix.lower() == ".docx":
        return DOCX_CONTENT_TYPE
    guessed, _ = mimetypes.guess_type(document_name)
    return guessed or _FALLBACK_MEDIA_TYPE


def document_exists(document_name: str) -> bool:
    """Return True if a blob exists for ``document_name``.

    Storage failures are logged and reported as "does not exist".
    """

    object_name = blob_storage.blob_path(document_name)
    try:
        return blob_storage.blob_exists(object_name)
    except DocumentStoreError as exc:
        logger.warning("Existence check for %s failed, assuming absent: %s", object_name, exc)
        return False


def fetch_document(document_name: str) -> dict[str, Any]:
    """Load a stored document and convert it to editor JSON.

    Raises DocumentNotFoundError, StorageUnavailableError or
    DocumentConversionError.
    """

    object_name = blob_storage.blob_path(document_name)
    if not blob_storage.blob_exists(object_name):
        raise DocumentNotFoundError(document_name)

    data = blob_storage.download_blob(object_name)
    try:
        format_type = format_of_name(document_name)
    except UnsupportedFormatError as exc:
        raise DocumentConversionError(f"'{document_name}' has no editable format") from exc

    document = decode_document(data, format_type)
    logger.info(
        "Fetched %s (%d bytes, %d paragraphs)",
        object_name,
        len(data),
        len(document["paragraphs"]),
    )
    return document


def persist_document(document_name: str, data: bytes) -> PersistResult:
    """Store ``data`` under the document's blob path, replacing older content."""

    object_name = blob_storage.blob_path(document_name)
    blob_storage.upload_blob(object_name, data, content_type=media_type_for(document_name))
    logger.info("Persisted %s (%d bytes)", object_name, len(data))
    return PersistResult(document_name=document_name, object_name=object_name, size=len(data))


def download_document(document_name: str) -> DownloadedDocument:
    object_name = blob_storage.blob_path(document_name)
    data = blob_storage.download_blob(object_name)
    return DownloadedDocument(
        filename=PurePosixPath(document_name).name,
        data=data,
        media_type=media_type_for(document_name),
    )


def convert_clipboard(content: str | None, content_type: str | None) -> str:
    """Convert pasted content into serialized editor JSON.

    Plain text is taken as-is, DOCX content arrives base64 encoded. Any
    failure yields an empty string so the editor falls back to its own
    paste handling.
    """

    if not content:
        return ""
    try:
        format_type = format_of(content_type)
        if format_type is FormatType.TXT:
            return dumps_document(text_to_document(content))
        raw = base64.b64decode(content, validate=True)
        return dumps_document(decode_document(raw, format_type))
    except (DocumentStoreError, binascii.Error) as exc:
        logger.info("Clipboard content of type %s could not be converted: %s", content_type, exc)
        return ""


__all__ = [
    "DownloadedDocument",
    "PersistResult",
    "convert_clipboard",
    "document_exists",
    "download_document",
    "fetch_document",
    "media_type_for",
    "persist_document",
]
