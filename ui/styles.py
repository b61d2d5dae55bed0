"""Styling helpers for Streamlit layouts."""
from __future__ import annotations

import streamlit as st


def render_app_styles() -> None:
    """Apply global styling for the editor page."""
    base_css = """
    <style>
    .stApp {
        background: linear-gradient(180deg, #f3f6fb 0%, #ffffff 60%);
    }
    [data-testid="stHeader"] {
        background: rgba(0, 0, 0, 0);
    }
    .document-title {
        font-size: 1.1rem;
        font-weight: 600;
        margin: 0.25rem 0 0.5rem;
    }
    .save-status {
        color: #5b6472;
        font-size: 0.85rem;
    }
    .stTextArea textarea {
        font-family: "Calibri", "Segoe UI", sans-serif;
        font-size: 1rem;
        line-height: 1.55;
        background: #ffffff;
    }
    </style>
    """
    st.markdown(base_css, unsafe_allow_html=True)


__all__ = ["render_app_styles"]
