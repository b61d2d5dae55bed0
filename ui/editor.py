"""Editor toolbar and document area."""
from __future__ import annotations

import streamlit as st

from document_codec import DOCX_CONTENT_TYPE, apply_text, document_to_text
from editor_runtime import EditorRuntime, EditorSnapshot
from errors import DocumentStoreError
from session_proxy import EditorSessionProxy
from session_state import open_file_manager

EDITOR_HEIGHT = 520


def render_toolbar(runtime: EditorRuntime, session: EditorSessionProxy, snapshot: EditorSnapshot) -> None:
    cols = st.columns(3)
    if cols[0].button("🆕 New", width="stretch"):
        runtime.request_new_document()
        st.rerun()
    if cols[1].button("📂 Open", help="Open the file manager", width="stretch"):
        open_file_manager()
        st.rerun()

    document_name = snapshot.document_name
    if cols[2].button("⬇ Download", disabled=document_name is None, width="stretch"):
        try:
            session["download_payload"] = (document_name, runtime.download(document_name or ""))
        except DocumentStoreError as exc:
            st.warning(f"Download is not available yet: {exc}")

    payload = session.get("download_payload")
    if payload and payload[0] == document_name:
        st.download_button(
            f"Save {payload[0]} to this device",
            data=payload[1],
            file_name=payload[0],
            mime=DOCX_CONTENT_TYPE,
            width="stretch",
        )


@st.fragment(run_every="2s")
def _render_save_status(runtime: EditorRuntime) -> None:
    snapshot = runtime.snapshot(consume_notice=False)
    if snapshot.document_name is None:
        return
    status = "Unsaved changes…" if snapshot.dirty else "All changes saved"
    st.markdown(f"<span class='save-status'>{status}</span>", unsafe_allow_html=True)


def render_editor(runtime: EditorRuntime, session: EditorSessionProxy, snapshot: EditorSnapshot) -> None:
    if not snapshot.editor_visible:
        return
    if snapshot.document_name is None:
        st.info("Open a document from the file manager or create a new one.")
        return

    st.markdown(f"<div class='document-title'>{snapshot.document_name}</div>", unsafe_allow_html=True)
    _render_save_status(runtime)

    widget_key = f"editor_text_{session.editor_load_token}"
    content = snapshot.content

    def _on_change() -> None:
        runtime.update_content(apply_text(content, st.session_state[widget_key]))

    st.text_area(
        "Document",
        value=document_to_text(content),
        key=widget_key,
        height=EDITOR_HEIGHT,
        label_visibility="collapsed",
        on_change=_on_change,
    )


__all__ = ["render_editor", "render_toolbar"]
