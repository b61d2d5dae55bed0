"""Loads files chosen in the file browser into the editor."""
from __future__ import annotations

import logging
from enum import Enum

from document_formats import is_editor_openable
from document_session import DocumentSession, EditorWorkspace
from errors import DocumentStoreError
from storage_client import DocumentStore

logger = logging.getLogger(__name__)

UNSUPPORTED_FORMAT_NOTICE = "The selected file type is not supported for the document editor."


class PickOutcome(str, Enum):
    LOADED = "loaded"
    UNSUPPORTED = "unsupported"
    FAILED = "failed"


class FilePickerBridge:
    def __init__(self, workspace: EditorWorkspace, store: DocumentStore):
        self._workspace = workspace
        self._store = store

    async def open_file(self, path: str, file_type: str, file_name: str) -> PickOutcome:
        """Replace the open document with ``file_name``.

        Unsaved changes of the previous session are discarded. Nothing
        changes when the type is unsupported or the fetch fails.
        """

        if not is_editor_openable(file_type):
            logger.info("Refusing to open %s (%s): unsupported type", path, file_type)
            self._workspace.notify(UNSUPPORTED_FORMAT_NOTICE)
            return PickOutcome.UNSUPPORTED

        try:
            content = await self._store.fetch(file_name)
        except DocumentStoreError as exc:
            logger.error("Error loading document %s: %s", file_name, exc)
            return PickOutcome.FAILED

        previous = self._workspace.replace_session(DocumentSession(name=file_name, content=content))
        if previous is not None and previous.dirty:
            logger.info("Discarded unsaved changes of %s", previous.name)
        logger.info("Opened %s from %s", file_name, path)
        return PickOutcome.LOADED


__all__ = ["FilePickerBridge", "PickOutcome", "UNSUPPORTED_FORMAT_NOTICE"]
