from __future__ import annotations

import asyncio

from autosave import AutosaveLoop
from document_session import DocumentSession, EditorWorkspace
from errors import DocumentConversionError


def _workspace(dirty: bool = True) -> EditorWorkspace:
    session = DocumentSession(name="Report.docx", content={"paragraphs": ["hello"]})
    if dirty:
        session.mark_dirty()
    return EditorWorkspace(session=session)


def test_clean_or_missing_session_is_not_uploaded(fake_store):
    async def scenario():
        assert AutosaveLoop(EditorWorkspace(), fake_store).tick() is None
        assert AutosaveLoop(_workspace(dirty=False), fake_store).tick() is None

    asyncio.run(scenario())
    assert fake_store.persist_calls == []


def test_dirty_session_is_persisted_once(fake_store):
    workspace = _workspace()

    async def scenario():
        autosave = AutosaveLoop(workspace, fake_store, encoder=lambda content: b"encoded")
        task = autosave.tick()
        assert task is not None
        assert await task is True
        assert autosave.tick() is None

    asyncio.run(scenario())

    assert fake_store.persist_calls == ["Report.docx"]
    assert fake_store.persisted["Report.docx"] == b"encoded"
    assert workspace.session.dirty is False


def test_failed_upload_keeps_session_dirty(fake_store, caplog):
    workspace = _workspace()
    fake_store.fail_persist = True

    async def scenario():
        autosave = AutosaveLoop(workspace, fake_store)
        assert await autosave.tick() is False
        fake_store.fail_persist = False
        assert await autosave.tick() is True

    asyncio.run(scenario())

    assert "will retry" in caplog.text
    assert fake_store.persist_calls == ["Report.docx", "Report.docx"]
    assert workspace.session.dirty is False


def test_ticks_are_dropped_while_upload_pending(fake_store):
    workspace = _workspace()

    async def scenario():
        fake_store.persist_gate = asyncio.Event()
        autosave = AutosaveLoop(workspace, fake_store, encoder=lambda content: b"x")
        first = autosave.tick()
        await asyncio.sleep(0)
        assert autosave.in_flight
        assert autosave.tick() is None
        assert autosave.tick() is None
        fake_store.persist_gate.set()
        await first

    asyncio.run(scenario())

    assert fake_store.persist_calls == ["Report.docx"]
    assert fake_store.max_concurrent_persists == 1


def test_edit_during_upload_keeps_dirty(fake_store):
    workspace = _workspace()

    async def scenario():
        fake_store.persist_gate = asyncio.Event()
        autosave = AutosaveLoop(workspace, fake_store, encoder=lambda content: b"x")
        first = autosave.tick()
        await asyncio.sleep(0)
        workspace.update_content({"paragraphs": ["hello again"]})
        fake_store.persist_gate.set()
        await first
        assert workspace.session.dirty is True
        second = autosave.tick()
        assert second is not None
        await second

    asyncio.run(scenario())

    assert len(fake_store.persist_calls) == 2
    assert workspace.session.dirty is False


def test_encoding_failure_skips_tick(fake_store, caplog):
    def broken_encoder(content):
        raise DocumentConversionError("cannot encode")

    async def scenario():
        return AutosaveLoop(_workspace(), fake_store, encoder=broken_encoder).tick()

    assert asyncio.run(scenario()) is None
    assert fake_store.persist_calls == []
    assert "Could not serialize" in caplog.text


def test_timer_persists_and_stop_returns_pending_upload(fake_store):
    workspace = _workspace()

    async def scenario():
        autosave = AutosaveLoop(workspace, fake_store, interval=0.01, encoder=lambda content: b"x")
        autosave.start()
        assert autosave.running
        for _ in range(100):
            if not workspace.session.dirty:
                break
            await asyncio.sleep(0.01)

        fake_store.persist_gate = asyncio.Event()
        workspace.mark_dirty()
        for _ in range(100):
            if autosave.in_flight:
                break
            await asyncio.sleep(0.01)

        pending = autosave.stop()
        assert not autosave.running
        assert pending is not None and not pending.done()
        fake_store.persist_gate.set()
        await autosave.wait_idle()
        assert pending.done()

    asyncio.run(scenario())

    assert workspace.session.dirty is False
    assert len(fake_store.persist_calls) == 2
