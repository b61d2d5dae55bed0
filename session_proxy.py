"""Session proxy for wrapping Streamlit's session state mapping."""
from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any

from editor_runtime import EditorRuntime, RuntimeLease


class EditorSessionProxy:
    """Lightweight view over a Streamlit ``session_state`` mapping."""

    def __init__(self, backing: MutableMapping[str, Any]):
        self._backing = backing

    # Basic mapping compatibility -------------------------------------------------
    def __getitem__(self, key: str) -> Any:
        return self._backing[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._backing[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._backing

    def get(self, key: str, default: Any = None) -> Any:
        return self._backing.get(key, default)

    def setdefault(self, key: str, default: Any) -> Any:
        return self._backing.setdefault(key, default)

    def pop(self, key: str, default: Any | None = None) -> Any:
        return self._backing.pop(key, default)

    # Convenience accessors -------------------------------------------------------
    @property
    def runtime(self) -> EditorRuntime | None:
        lease = self.runtime_lease
        return lease.runtime if lease is not None else None

    @property
    def runtime_lease(self) -> RuntimeLease | None:
        lease = self._backing.get("editor_runtime")
        return lease if isinstance(lease, RuntimeLease) else None

    @runtime_lease.setter
    def runtime_lease(self, value: RuntimeLease | None) -> None:
        self._backing["editor_runtime"] = value

    @property
    def show_file_manager(self) -> bool:
        return bool(self._backing.get("show_file_manager"))

    @show_file_manager.setter
    def show_file_manager(self, value: bool) -> None:
        self._backing["show_file_manager"] = bool(value)

    @property
    def file_manager_path(self) -> str:
        return str(self._backing.get("file_manager_path") or "/")

    @file_manager_path.setter
    def file_manager_path(self, value: str) -> None:
        self._backing["file_manager_path"] = value or "/"

    @property
    def editor_load_token(self) -> int:
        return int(self._backing.get("editor_load_token", 0) or 0)

    def bump_editor_load_token(self) -> int:
        """Force the editor widget to reload its text from the open document."""

        token = self.editor_load_token + 1
        self._backing["editor_load_token"] = token
        return token


__all__ = ["EditorSessionProxy"]
