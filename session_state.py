"""Session state helpers for the Streamlit editor app."""
from __future__ import annotations

from typing import Any

import streamlit as st

from editor_runtime import EditorRuntime, RuntimeLease
from session_proxy import EditorSessionProxy

_STATE_DEFAULTS: dict[str, Any] = {
    # Runtime hosting the document session and autosave timer
    "editor_runtime": None,

    # File browser dialog
    "show_file_manager": True,
    "file_manager_path": "/",
    "file_manager_error": None,

    # Editor widget
    "editor_load_token": 0,
    "download_payload": None,
}


def _proxy() -> EditorSessionProxy:
    """Return a proxy around the current Streamlit session state."""

    return EditorSessionProxy(st.session_state)


def ensure_state() -> EditorSessionProxy:
    proxy = _proxy()
    for key, default in _STATE_DEFAULTS.items():
        proxy.setdefault(key, default)
    return proxy


def ensure_runtime() -> EditorRuntime:
    """Return this browser session's editor runtime, starting it on first use."""

    proxy = _proxy()
    runtime = proxy.runtime
    if runtime is None:
        runtime = EditorRuntime().start()
        # closed once Streamlit discards this session state
        proxy.runtime_lease = RuntimeLease(runtime)
    return runtime


def open_file_manager(path: str | None = None) -> None:
    proxy = _proxy()
    proxy.show_file_manager = True
    proxy["file_manager_error"] = None
    if path is not None:
        proxy.file_manager_path = path


def close_file_manager() -> None:
    _proxy().show_file_manager = False


def document_replaced() -> None:
    proxy = _proxy()
    proxy.bump_editor_load_token()
    proxy["download_payload"] = None


def shutdown_runtime() -> None:
    """Tear down the runtime (the editor view going away)."""

    proxy = _proxy()
    lease = proxy.runtime_lease
    if lease is not None:
        lease.release()
    proxy.runtime_lease = None


__all__ = [
    "EditorSessionProxy",
    "close_file_manager",
    "document_replaced",
    "ensure_runtime",
    "ensure_state",
    "open_file_manager",
    "shutdown_runtime",
]
