from __future__ import annotations

import asyncio
import logging

from document_session import DocumentSession, EditorWorkspace
from file_picker import UNSUPPORTED_FORMAT_NOTICE, FilePickerBridge, PickOutcome


def _dirty_workspace() -> EditorWorkspace:
    session = DocumentSession(name="Draft.docx", content={"paragraphs": ["unsaved"]})
    session.mark_dirty()
    return EditorWorkspace(session=session, editor_visible=False)


def test_unsupported_type_shows_notice_and_keeps_session(fake_store):
    workspace = _dirty_workspace()
    previous = workspace.session

    outcome = asyncio.run(FilePickerBridge(workspace, fake_store).open_file("/Files/scan.pdf", ".pdf", "scan.pdf"))

    assert outcome is PickOutcome.UNSUPPORTED
    assert workspace.session is previous
    assert workspace.take_notice() == UNSUPPORTED_FORMAT_NOTICE
    assert fake_store.fetch_calls == []


def test_supported_file_replaces_session(fake_store, caplog):
    caplog.set_level(logging.INFO)
    fake_store.documents["Report.docx"] = {"paragraphs": [{"text": "Loaded", "style": "Title"}]}
    workspace = _dirty_workspace()

    outcome = asyncio.run(
        FilePickerBridge(workspace, fake_store).open_file("/Files/Report.docx", "docx", "Report.docx")
    )

    assert outcome is PickOutcome.LOADED
    assert workspace.session.name == "Report.docx"
    assert workspace.session.content == {"paragraphs": [{"text": "Loaded", "style": "Title"}]}
    assert workspace.session.dirty is False
    assert workspace.editor_visible is True
    assert workspace.notice is None
    assert "Discarded unsaved changes of Draft.docx" in caplog.text


def test_fetch_failure_leaves_workspace_unchanged(fake_store, caplog):
    fake_store.fail_fetch = True
    workspace = _dirty_workspace()
    previous = workspace.session

    outcome = asyncio.run(FilePickerBridge(workspace, fake_store).open_file("/Files/Report.docx", ".docx", "Report.docx"))

    assert outcome is PickOutcome.FAILED
    assert workspace.session is previous
    assert workspace.session.dirty is True
    assert "Error loading document Report.docx" in caplog.text
