"""Periodic background persistence of the open document."""
from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Callable, Mapping

from document_codec import encode_docx
from document_session import DocumentSession, EditorWorkspace
from errors import DocumentStoreError
from storage_client import DocumentStore

logger = logging.getLogger(__name__)

AUTOSAVE_INTERVAL_SECONDS = float(os.getenv("AUTOSAVE_INTERVAL_SECONDS") or 1.0)


class AutosaveLoop:
    """Pushes the workspace's session to storage whenever it is dirty.

    Must be driven from a single event loop. At most one upload is in
    flight; a tick that fires while an upload is pending is dropped.
    Failed uploads leave the session dirty so the next tick retries.
    """

    def __init__(
        self,
        workspace: EditorWorkspace,
        store: DocumentStore,
        *,
        interval: float = AUTOSAVE_INTERVAL_SECONDS,
        encoder: Callable[[Mapping[str, Any]], bytes] = encode_docx,
    ):
        self._workspace = workspace
        self._store = store
        self._interval = interval
        self._encode = encoder
        self._timer: asyncio.Task | None = None
        self._in_flight: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    def tick(self) -> asyncio.Task | None:
        """Start an upload if the session is dirty; return the upload task, if any."""

        session = self._workspace.session
        if session is None or not session.dirty:
            return None
        if self.in_flight:
            logger.debug("Autosave tick skipped, upload of %s still pending", session.name)
            return None

        revision = session.revision
        try:
            payload = self._encode(session.content)
        except DocumentStoreError as exc:
            logger.warning("Could not serialize %s for autosave: %s", session.name, exc)
            return None

        self._in_flight = asyncio.get_running_loop().create_task(
            self._persist(session, revision, payload),
            name=f"autosave:{session.name}",
        )
        return self._in_flight

    async def _persist(self, session: DocumentSession, revision: int, payload: bytes) -> bool:
        try:
            await self._store.persist(session.name, payload)
        except DocumentStoreError as exc:
            logger.warning("Autosave of %s failed, will retry: %s", session.name, exc)
            return False

        if session.mark_persisted(revision):
            logger.debug("Autosaved %s (revision %d, %d bytes)", session.name, revision, len(payload))
        else:
            logger.debug("Autosaved %s revision %d, newer edits pending", session.name, revision)
        return True

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.tick()

    def start(self) -> None:
        if self.running:
            return
        self._timer = asyncio.get_running_loop().create_task(self._run(), name="autosave-timer")
        logger.debug("Autosave started with %.2fs interval", self._interval)

    def stop(self) -> asyncio.Task | None:
        """Cancel the timer; a pending upload keeps running and is returned."""

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.debug("Autosave stopped")
        return self._in_flight if self.in_flight else None

    async def wait_idle(self) -> None:
        task = self._in_flight
        if task is not None and not task.done():
            await asyncio.shield(task)


__all__ = ["AUTOSAVE_INTERVAL_SECONDS", "AutosaveLoop"]
