"""File browser panel that feeds picked files into the editor."""
from __future__ import annotations

from typing import Any, Mapping

import streamlit as st

from editor_runtime import EditorRuntime
from errors import DocumentStoreError
from file_picker import PickOutcome
from session_proxy import EditorSessionProxy
from session_state import close_file_manager, document_replaced


def _parent_path(path: str) -> str:
    parts = [part for part in path.split("/") if part]
    return "/" + "".join(f"{part}/" for part in parts[:-1])


def _format_size(size: int | None) -> str:
    value = int(size or 0)
    if value < 1024:
        return f"{value} B"
    if value < 1024 * 1024:
        return f"{value / 1024:.1f} KB"
    return f"{value / 1024 / 1024:.1f} MB"


def _open_entry(runtime: EditorRuntime, entry: Mapping[str, Any], path: str) -> None:
    name = str(entry.get("name") or "")
    # documents are addressed relative to the storage root
    document_name = f"{path.lstrip('/')}{name}"
    outcome = runtime.open_file(f"{path}{name}", str(entry.get("type") or ""), document_name)
    if outcome is PickOutcome.LOADED:
        close_file_manager()
        document_replaced()


def render_file_manager(runtime: EditorRuntime, session: EditorSessionProxy) -> None:
    """Render the folder listing; opening a supported file closes the panel."""

    if not session.show_file_manager:
        return

    path = session.file_manager_path
    with st.container(border=True):
        header_cols = st.columns([6, 1])
        with header_cols[0]:
            st.markdown(f"**File Manager** · `Files{path}`")
        with header_cols[1]:
            if st.button("✕", key="close_file_manager", help="Close"):
                close_file_manager()
                st.rerun()

        if path != "/" and st.button("⬆ Up", key="file_manager_up"):
            session.file_manager_path = _parent_path(path)
            st.rerun()

        try:
            entries = runtime.list_files(path)
        except DocumentStoreError as exc:
            st.error(f"Could not load the folder: {exc}")
            return

        if not entries:
            st.caption("This folder is empty.")
            return

        for index, entry in enumerate(entries):
            cols = st.columns([5, 2, 2])
            name = str(entry.get("name") or "")
            if entry.get("isFile"):
                cols[0].write(f"📄 {name}")
                cols[1].caption(_format_size(entry.get("size")))
                if cols[2].button("Open", key=f"open_{index}_{name}"):
                    _open_entry(runtime, entry, path)
                    st.rerun()
            else:
                cols[0].write(f"📁 {name}")
                if cols[2].button("Browse", key=f"browse_{index}_{name}"):
                    session.file_manager_path = f"{path}{name}/"
                    st.rerun()


__all__ = ["render_file_manager"]
