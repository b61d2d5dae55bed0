from __future__ import annotations

import asyncio
import random

import pytest

from document_session import DocumentSession, EditorWorkspace
from new_document import (
    DEFAULT_NAME_POOL,
    NewDocumentState,
    NewDocumentWorkflow,
    full_document_name,
)


@pytest.mark.parametrize(
    ("candidate", "expected"),
    [("Report", "Report.docx"), (" Report2 ", "Report2.docx"), ("Memo.DOCX", "Memo.DOCX"), ("a.txt", "a.txt.docx")],
)
def test_full_document_name(candidate, expected):
    assert full_document_name(candidate) == expected


def _workflow(fake_store, workspace=None):
    return NewDocumentWorkflow(workspace or EditorWorkspace(), fake_store, rng=random.Random(7))


def test_request_new_opens_prompt_with_pool_name(fake_store):
    workflow = _workflow(fake_store)

    name = workflow.request_new()

    assert name in DEFAULT_NAME_POOL
    assert workflow.state is NewDocumentState.PROMPT_OPEN
    assert workflow.prompt_visible


def test_duplicate_name_is_rejected(fake_store):
    fake_store.documents["Report.docx"] = {"paragraphs": []}
    workspace = EditorWorkspace()
    workflow = _workflow(fake_store, workspace)
    workflow.request_new()

    state = asyncio.run(workflow.confirm("Report"))

    assert state is NewDocumentState.REJECTED
    assert workflow.error == "Document already exists. Please choose a different name."
    assert workflow.prompt_visible
    assert workspace.session is None
    assert fake_store.exists_calls == ["Report.docx"]


def test_free_name_creates_dirty_session(fake_store):
    previous = DocumentSession(name="Old.docx")
    workspace = EditorWorkspace(session=previous, editor_visible=False)
    workflow = _workflow(fake_store, workspace)
    workflow.request_new()

    state = asyncio.run(workflow.confirm("Report2"))

    assert state is NewDocumentState.COMMITTED
    assert not workflow.prompt_visible
    assert workspace.session is not previous
    assert workspace.session.name == "Report2.docx"
    assert workspace.session.content == {"paragraphs": []}
    assert workspace.session.dirty is True
    assert workspace.editor_visible is True


def test_rejected_prompt_can_retry(fake_store):
    fake_store.documents["Report.docx"] = {"paragraphs": []}
    workspace = EditorWorkspace()
    workflow = _workflow(fake_store, workspace)
    workflow.request_new()

    async def scenario():
        await workflow.confirm("Report")
        return await workflow.confirm("Report (final)")

    assert asyncio.run(scenario()) is NewDocumentState.COMMITTED
    assert workspace.session.name == "Report (final).docx"
    assert workflow.error is None


def test_blank_name_keeps_prompt_open(fake_store):
    workflow = _workflow(fake_store)
    workflow.request_new()

    state = asyncio.run(workflow.confirm("   "))

    assert state is NewDocumentState.PROMPT_OPEN
    assert workflow.error == "Please enter a document name."
    assert fake_store.exists_calls == []


def test_cancel_closes_prompt_without_changes(fake_store):
    workspace = EditorWorkspace()
    workflow = _workflow(fake_store, workspace)
    workflow.request_new()

    workflow.cancel()

    assert workflow.state is NewDocumentState.IDLE
    assert not workflow.prompt_visible
    assert workspace.session is None


def test_confirm_without_prompt_is_an_error(fake_store):
    with pytest.raises(RuntimeError):
        asyncio.run(_workflow(fake_store).confirm("Report"))
