"""Name prompt shown after pressing "New"."""
from __future__ import annotations

import streamlit as st

from editor_runtime import EditorRuntime, EditorSnapshot
from new_document import NewDocumentState
from session_state import document_replaced


def render_new_document_prompt(runtime: EditorRuntime, snapshot: EditorSnapshot) -> None:
    if not snapshot.prompt_visible:
        return

    with st.form("new_document_form", clear_on_submit=False, border=True):
        st.markdown("**New Document**")
        candidate = st.text_input(
            "Document name",
            value=snapshot.prompt_candidate or "",
            key=f"new_document_name_{snapshot.prompt_candidate}",
            help="The .docx extension is added automatically.",
        )
        if snapshot.prompt_error:
            st.error(snapshot.prompt_error)
        cols = st.columns(2)
        confirmed = cols[0].form_submit_button("Create", type="primary", width="stretch")
        cancelled = cols[1].form_submit_button("Cancel", width="stretch")

    if cancelled:
        runtime.cancel_new_document()
        st.rerun()
    if confirmed:
        state = runtime.confirm_new_document(candidate)
        if state is NewDocumentState.COMMITTED:
            document_replaced()
        st.rerun()


__all__ = ["render_new_document_prompt"]
