"""Event-loop thread that hosts the editor's lifecycle components.

Streamlit reruns the UI script on its own threads. The document session,
the autosave timer and the storage calls all live on one asyncio loop run
by this module; the UI only submits work to it and waits for results.
"""
from __future__ import annotations

import asyncio
import copy
import logging
import threading
import weakref
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from autosave import AUTOSAVE_INTERVAL_SECONDS, AutosaveLoop
from document_session import EditorWorkspace
from file_picker import FilePickerBridge, PickOutcome
from new_document import NewDocumentState, NewDocumentWorkflow
from storage_client import StorageClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

CALL_TIMEOUT_SECONDS = 60.0
SHUTDOWN_TIMEOUT_SECONDS = 10.0


@dataclass(slots=True, frozen=True)
class EditorSnapshot:
    """Read-only copy of the workspace for rendering."""

    document_name: str | None
    content: dict[str, Any] | None
    dirty: bool
    editor_visible: bool
    notice: str | None
    prompt_visible: bool
    prompt_state: NewDocumentState
    prompt_candidate: str | None
    prompt_error: str | None


class EditorRuntime:
    def __init__(
        self,
        store: StorageClient | None = None,
        *,
        autosave_interval: float = AUTOSAVE_INTERVAL_SECONDS,
    ):
        self.workspace = EditorWorkspace()
        self._store = store or StorageClient()
        self.autosave = AutosaveLoop(self.workspace, self._store, interval=autosave_interval)
        self.new_document = NewDocumentWorkflow(self.workspace, self._store)
        self.file_picker = FilePickerBridge(self.workspace, self._store)
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, name="editor-runtime", daemon=True)
        self._closed = False

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    @property
    def started(self) -> bool:
        return self._thread.is_alive()

    def start(self) -> "EditorRuntime":
        if not self.started:
            self._thread.start()
            self.call(self.autosave.start)
        return self

    def run(self, awaitable: Awaitable[T], timeout: float = CALL_TIMEOUT_SECONDS) -> T:
        """Run ``awaitable`` on the runtime loop and block until it finishes."""

        if self._closed:
            raise RuntimeError("Editor runtime is closed")
        future = asyncio.run_coroutine_threadsafe(_as_coroutine(awaitable), self._loop)
        return future.result(timeout)

    def call(self, func: Callable[..., T], *args: Any, timeout: float = CALL_TIMEOUT_SECONDS) -> T:
        """Run a plain callable on the runtime loop and return its result."""

        async def _invoke() -> T:
            return func(*args)

        return self.run(_invoke(), timeout=timeout)

    # UI-facing operations --------------------------------------------------------
    def snapshot(self, *, consume_notice: bool = True) -> EditorSnapshot:
        return self.call(self._snapshot, consume_notice)

    def _snapshot(self, consume_notice: bool) -> EditorSnapshot:
        session = self.workspace.session
        workflow = self.new_document
        notice = self.workspace.take_notice() if consume_notice else self.workspace.notice
        return EditorSnapshot(
            document_name=session.name if session else None,
            content=copy.deepcopy(session.content) if session else None,
            dirty=bool(session and session.dirty),
            editor_visible=self.workspace.editor_visible,
            notice=notice,
            prompt_visible=workflow.prompt_visible,
            prompt_state=workflow.state,
            prompt_candidate=workflow.candidate,
            prompt_error=workflow.error,
        )

    def update_content(self, content: Mapping[str, Any]) -> None:
        self.call(self.workspace.update_content, copy.deepcopy(dict(content)))

    def request_new_document(self) -> str:
        return self.call(self.new_document.request_new)

    def confirm_new_document(self, candidate: str) -> NewDocumentState:
        return self.run(self.new_document.confirm(candidate))

    def cancel_new_document(self) -> None:
        self.call(self.new_document.cancel)

    def open_file(self, path: str, file_type: str, file_name: str) -> PickOutcome:
        return self.run(self.file_picker.open_file(path, file_type, file_name))

    def list_files(self, path: str = "/") -> list[dict[str, Any]]:
        return self.run(self._store.list_files(path))

    def download(self, name: str) -> bytes:
        return self.run(self._store.download(name))

    # Shutdown --------------------------------------------------------------------
    async def _shutdown(self) -> None:
        pending = self.autosave.stop()
        if pending is not None:
            try:
                await asyncio.wait_for(self.autosave.wait_idle(), SHUTDOWN_TIMEOUT_SECONDS)
            except asyncio.TimeoutError:
                logger.warning("Autosave upload still pending at shutdown")
        await self._store.aclose()

    def close(self) -> None:
        """Stop the autosave timer, let a pending upload finish, stop the loop."""

        if self._closed:
            return
        if threading.current_thread() is self._thread:
            # cannot block on our own loop; finish the shutdown there
            self._closed = True
            self._loop.create_task(self._shutdown_and_stop())
            return
        if self.started:
            try:
                self.run(self._shutdown(), timeout=SHUTDOWN_TIMEOUT_SECONDS + 5)
            except FutureTimeoutError:
                logger.warning("Editor runtime shutdown timed out")
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout=SHUTDOWN_TIMEOUT_SECONDS)
        self._closed = True
        if not self._loop.is_running():
            self._loop.close()

    async def _shutdown_and_stop(self) -> None:
        try:
            await self._shutdown()
        finally:
            self._loop.stop()


class RuntimeLease:
    """Ties a runtime to the browser session holding this lease.

    The runtime is closed when the lease is released or garbage collected,
    which happens once Streamlit drops the session state that owns it.
    """

    def __init__(self, runtime: EditorRuntime):
        self.runtime = runtime
        self._finalizer = weakref.finalize(self, runtime.close)

    @property
    def alive(self) -> bool:
        return self._finalizer.alive

    def release(self) -> None:
        self._finalizer()


async def _as_coroutine(awaitable: Awaitable[T]) -> T:
    return await awaitable


__all__ = ["EditorRuntime", "EditorSnapshot", "RuntimeLease"]
