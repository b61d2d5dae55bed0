"""Async HTTP client for the document storage proxy."""
from __future__ import annotations

import logging
import os
from typing import Any, Protocol

import httpx
from dotenv import load_dotenv

from document_codec import DOCX_CONTENT_TYPE, normalize_document
from errors import DocumentConversionError, DocumentNotFoundError, StorageClientError

load_dotenv()

logger = logging.getLogger(__name__)

DOCUMENT_API_URL = (os.getenv("DOCUMENT_API_URL") or "http://localhost:62869/").strip()
DOCUMENT_API_TIMEOUT = float(os.getenv("DOCUMENT_API_TIMEOUT") or 30.0)

_OK_STATUSES = {200, 304}


class DocumentStore(Protocol):
    """Storage operations the editor components rely on."""

    async def exists(self, name: str) -> bool: ...

    async def fetch(self, name: str) -> dict[str, Any]: ...

    async def persist(self, name: str, data: bytes) -> None: ...

    async def download(self, name: str) -> bytes: ...


class StorageClient:
    """Client-side view of the storage proxy used by the editor components.

    Calls are asynchronous and meant to run on the editor runtime's event
    loop. Failures surface as ``StorageClientError`` except for ``exists``,
    which never raises.
    """

    def __init__(
        self,
        base_url: str = DOCUMENT_API_URL,
        *,
        timeout: float = DOCUMENT_API_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout, connect=10.0),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.post(path, **kwargs)
        except httpx.HTTPError as exc:
            raise StorageClientError(f"POST {path} failed: {exc}") from exc

    async def exists(self, name: str) -> bool:
        try:
            response = await self._post("documents/exists", json={"fileName": name})
            if response.status_code not in _OK_STATUSES:
                raise StorageClientError(
                    f"Existence check returned {response.status_code}",
                    status_code=response.status_code,
                )
            payload = response.json()
            if not isinstance(payload, dict):
                raise StorageClientError("Existence check returned an unexpected body")
            return bool(payload.get("exists"))
        except (StorageClientError, ValueError) as exc:
            logger.warning("Existence check for %s failed, treating as absent: %s", name, exc)
            return False

    async def fetch(self, name: str) -> dict[str, Any]:
        response = await self._post("documents/fetch", json={"documentName": name})
        if response.status_code == 404:
            raise DocumentNotFoundError(name)
        if response.status_code not in _OK_STATUSES:
            raise StorageClientError(
                f"Fetching '{name}' returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return normalize_document(response.json())
        except (ValueError, DocumentConversionError) as exc:
            raise StorageClientError(f"Fetching '{name}' returned an invalid document") from exc

    async def persist(self, name: str, data: bytes) -> None:
        response = await self._post(
            "documents/persist",
            data={"documentName": name},
            files={"data": (name, data, DOCX_CONTENT_TYPE)},
        )
        if response.status_code not in _OK_STATUSES:
            raise StorageClientError(
                f"Persisting '{name}' returned {response.status_code}",
                status_code=response.status_code,
            )

    async def download(self, name: str) -> bytes:
        try:
            response = await self._client.get("documents/download", params={"documentName": name})
        except httpx.HTTPError as exc:
            raise StorageClientError(f"Downloading '{name}' failed: {exc}") from exc
        if response.status_code == 404:
            raise DocumentNotFoundError(name)
        if response.status_code not in _OK_STATUSES:
            raise StorageClientError(
                f"Downloading '{name}' returned {response.status_code}",
                status_code=response.status_code,
            )
        return response.content

    async def list_files(self, path: str = "/") -> list[dict[str, Any]]:
        """Entries of a folder via the file-browser ``read`` operation."""

        response = await self._post("filemanager/operations", json={"action": "read", "path": path})
        if response.status_code not in _OK_STATUSES:
            raise StorageClientError(
                f"Listing '{path}' returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise StorageClientError(f"Listing '{path}' returned invalid JSON") from exc
        if payload.get("error"):
            raise StorageClientError(str(payload["error"].get("message") or payload["error"]))
        return list(payload.get("files") or [])


__all__ = ["DOCUMENT_API_URL", "DocumentStore", "StorageClient"]
