from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from google.api_core.exceptions import NotFound, ServiceUnavailable

import blob_storage
from errors import DocumentNotFoundError, StorageClientError


class StubClientFactory:
    """Callable wrapper that mimics functools.lru_cache cache_clear API."""

    def __init__(self, client):
        self.client = client

    def __call__(self):
        return self.client

    def cache_clear(self):
        pass


@dataclass
class StoredObject:
    data: bytes
    content_type: str | None
    updated: datetime


class FakeBlob:
    def __init__(self, client: "FakeGCSClient", name: str):
        self._client = client
        self.name = name

    @property
    def _stored(self) -> StoredObject | None:
        return self._client.objects.get(self.name)

    @property
    def size(self) -> int | None:
        stored = self._stored
        return len(stored.data) if stored else None

    @property
    def updated(self) -> datetime | None:
        stored = self._stored
        return stored.updated if stored else None

    @property
    def content_type(self) -> str | None:
        stored = self._stored
        return stored.content_type if stored else None

    def exists(self) -> bool:
        self._client.check()
        return self.name in self._client.objects

    def download_as_bytes(self) -> bytes:
        self._client.check()
        stored = self._stored
        if stored is None:
            raise NotFound(f"No such object: {self.name}")
        return stored.data

    def upload_from_string(self, data, content_type: str | None = None) -> None:
        self._client.check()
        payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        self._client.put(self.name, payload, content_type)

    def delete(self) -> None:
        self._client.check()
        if self.name not in self._client.objects:
            raise NotFound(f"No such object: {self.name}")
        del self._client.objects[self.name]


class FakeBucket:
    def __init__(self, client: "FakeGCSClient"):
        self._client = client

    def blob(self, name: str) -> FakeBlob:
        return FakeBlob(self._client, name)

    def get_blob(self, name: str) -> FakeBlob | None:
        self._client.check()
        return FakeBlob(self._client, name) if name in self._client.objects else None

    def copy_blob(self, blob: FakeBlob, destination_bucket: "FakeBucket", new_name: str) -> FakeBlob:
        self._client.check()
        stored = self._client.objects.get(blob.name)
        if stored is None:
            raise NotFound(f"No such object: {blob.name}")
        self._client.put(new_name, stored.data, stored.content_type)
        return FakeBlob(self._client, new_name)


class FakeListing:
    def __init__(self, blobs: list[FakeBlob], prefixes: set[str]):
        self._blobs = blobs
        self.prefixes = prefixes

    def __iter__(self):
        return iter(self._blobs)


@dataclass
class FakeGCSClient:
    objects: dict[str, StoredObject] = field(default_factory=dict)
    failing: bool = False
    bucket_names: list[str] = field(default_factory=list)
    _clock: datetime = field(default_factory=lambda: datetime(2024, 1, 1, tzinfo=timezone.utc))

    def check(self) -> None:
        if self.failing:
            raise ServiceUnavailable("storage is down")

    def put(self, name: str, data: bytes, content_type: str | None = None) -> None:
        self._clock += timedelta(minutes=1)
        self.objects[name] = StoredObject(data, content_type, self._clock)

    def bucket(self, name: str) -> FakeBucket:
        self.bucket_names.append(name)
        return FakeBucket(self)

    def list_blobs(self, bucket_name: str, *, prefix: str | None = None, delimiter: str | None = None):
        self.check()
        prefix = prefix or ""
        blobs: list[FakeBlob] = []
        prefixes: set[str] = set()
        for name in sorted(self.objects):
            if not name.startswith(prefix):
                continue
            rest = name[len(prefix):]
            if delimiter and delimiter in rest:
                prefixes.add(prefix + rest.split(delimiter, 1)[0] + delimiter)
                continue
            blobs.append(FakeBlob(self, name))
        return FakeListing(blobs, prefixes)


@pytest.fixture
def fake_gcs(monkeypatch) -> FakeGCSClient:
    client = FakeGCSClient()
    monkeypatch.setattr(blob_storage, "GCS_BUCKET_NAME", "bucket", raising=False)
    monkeypatch.setattr(blob_storage, "DOCUMENT_ROOT_PREFIX", "Files/", raising=False)
    monkeypatch.setattr(blob_storage, "_get_client", StubClientFactory(client), raising=False)
    return client


class FakeDocumentStore:
    """In-memory stand-in for the HTTP storage client."""

    def __init__(self) -> None:
        self.documents: dict[str, Any] = {}
        self.persisted: dict[str, bytes] = {}
        self.persist_calls: list[str] = []
        self.exists_calls: list[str] = []
        self.fetch_calls: list[str] = []
        self.fail_persist = False
        self.fail_fetch = False
        self.persist_gate: asyncio.Event | None = None
        self.active_persists = 0
        self.max_concurrent_persists = 0

    async def exists(self, name: str) -> bool:
        self.exists_calls.append(name)
        return name in self.documents or name in self.persisted

    async def fetch(self, name: str) -> dict[str, Any]:
        self.fetch_calls.append(name)
        if self.fail_fetch:
            raise StorageClientError("Fetching failed", status_code=500)
        if name not in self.documents:
            raise DocumentNotFoundError(name)
        return self.documents[name]

    async def persist(self, name: str, data: bytes) -> None:
        self.persist_calls.append(name)
        self.active_persists += 1
        self.max_concurrent_persists = max(self.max_concurrent_persists, self.active_persists)
        try:
            if self.persist_gate is not None:
                await self.persist_gate.wait()
            if self.fail_persist:
                raise StorageClientError("Persisting failed", status_code=500)
            self.persisted[name] = data
        finally:
            self.active_persists -= 1

    async def download(self, name: str) -> bytes:
        if name not in self.persisted:
            raise DocumentNotFoundError(name)
        return self.persisted[name]

    async def list_files(self, path: str = "/") -> list[dict[str, Any]]:
        return [{"name": name, "isFile": True, "type": "." + name.rsplit(".", 1)[-1]} for name in self.documents]

    async def aclose(self) -> None:
        pass


@pytest.fixture
def fake_store() -> FakeDocumentStore:
    return FakeDocumentStore()
