"""Thin wrapper over Google Cloud Storage for document blobs."""
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from typing import Any, Iterator

from dotenv import load_dotenv
from google.api_core.exceptions import GoogleAPIError, NotFound
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage

from errors import DocumentNotFoundError, StorageUnavailableError
from google_credentials import get_service_account_credentials

load_dotenv()

logger = logging.getLogger(__name__)

GCS_BUCKET_NAME = (os.getenv("GCS_BUCKET_NAME") or "").strip()
GCP_PROJECT = (os.getenv("GCP_PROJECT") or "").strip()
_DOCUMENT_ROOT_PREFIX_RAW = os.getenv("DOCUMENT_ROOT_PREFIX", "Files/")


def _normalize_prefix(raw: str) -> str:
    prefix = raw.strip().lstrip("/")
    if prefix and not prefix.endswith("/"):
        prefix += "/"
    return prefix


DOCUMENT_ROOT_PREFIX = _normalize_prefix(_DOCUMENT_ROOT_PREFIX_RAW)


@dataclass(slots=True)
class BlobInfo:
    """Metadata of a single stored blob."""

    object_name: str
    size: int | None
    updated: datetime | None
    content_type: str | None = None


@dataclass(slots=True)
class BlobListing:
    blobs: list[BlobInfo] = field(default_factory=list)
    prefixes: list[str] = field(default_factory=list)


def blob_path(document_name: str) -> str:
    """Return the object name a document is stored under (``Files/<name>``)."""

    return f"{DOCUMENT_ROOT_PREFIX}{document_name.lstrip('/')}"


def is_storage_configured() -> bool:
    return bool(GCS_BUCKET_NAME)


@lru_cache(maxsize=1)
def _get_client() -> Any:
    client_kwargs: dict[str, Any] = {}
    if GCP_PROJECT:
        client_kwargs["project"] = GCP_PROJECT
    credentials = get_service_account_credentials()
    if credentials is not None:
        client_kwargs["credentials"] = credentials
        if not GCP_PROJECT:
            project_id = getattr(credentials, "project_id", "")
            if project_id:
                client_kwargs["project"] = project_id
    return storage.Client(**client_kwargs)


def reset_blob_client_cache() -> None:
    """Clear the cached storage client (used in tests)."""

    _get_client.cache_clear()


@contextmanager
def _storage_call(action: str, object_name: str) -> Iterator[None]:
    try:
        yield
    except NotFound as exc:
        raise DocumentNotFoundError(object_name) from exc
    except (GoogleAPIError, GoogleAuthError, OSError) as exc:
        logger.warning("GCS %s failed for %s: %s", action, object_name, exc)
        raise StorageUnavailableError(f"Blob storage {action} failed for '{object_name}'") from exc


def _bucket() -> Any:
    if not is_storage_configured():
        raise StorageUnavailableError("GCS_BUCKET_NAME is not configured")
    with _storage_call("connect", GCS_BUCKET_NAME):
        return _get_client().bucket(GCS_BUCKET_NAME)


def _to_info(blob: Any) -> BlobInfo:
    return BlobInfo(
        object_name=getattr(blob, "name", ""),
        size=getattr(blob, "size", None),
        updated=getattr(blob, "updated", None),
        content_type=getattr(blob, "content_type", None),
    )


def blob_exists(object_name: str) -> bool:
    bucket = _bucket()
    with _storage_call("exists", object_name):
        return bool(bucket.blob(object_name).exists())


def download_blob(object_name: str) -> bytes:
    bucket = _bucket()
    with _storage_call("download", object_name):
        return bucket.blob(object_name).download_as_bytes()


def upload_blob(object_name: str, data: bytes, *, content_type: str | None = None) -> None:
    """Upload ``data``, overwriting any existing blob with the same name."""

    bucket = _bucket()
    with _storage_call("upload", object_name):
        bucket.blob(object_name).upload_from_string(data, content_type=content_type)
    logger.debug("Uploaded %d bytes to %s", len(data), object_name)


def delete_blob(object_name: str) -> None:
    bucket = _bucket()
    with _storage_call("delete", object_name):
        bucket.blob(object_name).delete()


def get_blob_info(object_name: str) -> BlobInfo:
    bucket = _bucket()
    with _storage_call("details", object_name):
        blob = bucket.get_blob(object_name)
    if blob is None:
        raise DocumentNotFoundError(object_name)
    return _to_info(blob)


def copy_blob(source_name: str, destination_name: str) -> None:
    bucket = _bucket()
    with _storage_call("copy", source_name):
        bucket.copy_blob(bucket.blob(source_name), bucket, destination_name)


def list_blobs(prefix: str, *, delimiter: str | None = "/") -> BlobListing:
    """List blobs under ``prefix``; with a delimiter, sub-folders come back as prefixes."""

    if not is_storage_configured():
        raise StorageUnavailableError("GCS_BUCKET_NAME is not configured")
    with _storage_call("list", prefix):
        iterator = _get_client().list_blobs(GCS_BUCKET_NAME, prefix=prefix or None, delimiter=delimiter)
        blobs = [_to_info(blob) for blob in iterator]
        prefixes = sorted(getattr(iterator, "prefixes", None) or ())
    return BlobListing(blobs=blobs, prefixes=prefixes)


__all__ = [
    "BlobInfo",
    "BlobListing",
    "DOCUMENT_ROOT_PREFIX",
    "blob_exists",
    "blob_path",
    "copy_blob",
    "delete_blob",
    "download_blob",
    "get_blob_info",
    "is_storage_configured",
    "list_blobs",
    "reset_blob_client_cache",
    "upload_blob",
]
