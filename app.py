# app.py
from __future__ import annotations

import logging
import os

import streamlit as st
from dotenv import load_dotenv

from session_state import ensure_runtime, ensure_state, shutdown_runtime
from ui.editor import render_editor, render_toolbar
from ui.file_manager import render_file_manager
from ui.new_document import render_new_document_prompt
from ui.styles import render_app_styles

load_dotenv()

logging.basicConfig(level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper())

st.set_page_config(page_title="Document Editor", page_icon="📝", layout="wide")

session = ensure_state()
runtime = ensure_runtime()
render_app_styles()

header_cols = st.columns([6, 1])
with header_cols[0]:
    st.title("📝 Document Editor")
with header_cols[1]:
    menu = st.popover("⚙️", width="stretch")
    with menu:
        st.caption("Changes are saved automatically every second.")
        if st.button("Close document", width="stretch"):
            shutdown_runtime()
            st.session_state["download_payload"] = None
            st.rerun()

snapshot = runtime.snapshot()
if snapshot.notice:
    st.warning(snapshot.notice)

render_toolbar(runtime, session, snapshot)
render_new_document_prompt(runtime, snapshot)
render_file_manager(runtime, session)
render_editor(runtime, session, snapshot)
