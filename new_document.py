"""Name prompt and duplicate check for creating a document."""
from __future__ import annotations

import logging
import random
from enum import Enum

from document_formats import DEFAULT_DOCUMENT_EXTENSION
from document_session import DocumentSession, EditorWorkspace
from errors import DuplicateNameError
from storage_client import DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_NAME_POOL = ("Untitled", "New Document", "Draft", "Notes", "Report")
EMPTY_NAME_MESSAGE = "Please enter a document name."


class NewDocumentState(str, Enum):
    IDLE = "idle"
    PROMPT_OPEN = "prompt_open"
    CHECKING = "checking"
    REJECTED = "rejected"
    COMMITTED = "committed"


def full_document_name(candidate: str) -> str:
    name = candidate.strip()
    if not name.lower().endswith(DEFAULT_DOCUMENT_EXTENSION):
        name = f"{name}{DEFAULT_DOCUMENT_EXTENSION}"
    return name


class NewDocumentWorkflow:
    """State machine behind the editor's "New" button."""

    def __init__(
        self,
        workspace: EditorWorkspace,
        store: DocumentStore,
        *,
        name_pool: tuple[str, ...] = DEFAULT_NAME_POOL,
        rng: random.Random | None = None,
    ):
        self._workspace = workspace
        self._store = store
        self._name_pool = name_pool
        self._rng = rng or random.Random()
        self.state = NewDocumentState.IDLE
        self.candidate: str | None = None
        self.error: str | None = None

    @property
    def prompt_visible(self) -> bool:
        return self.state in (
            NewDocumentState.PROMPT_OPEN,
            NewDocumentState.CHECKING,
            NewDocumentState.REJECTED,
        )

    def request_new(self) -> str:
        """Open the prompt with a default name and return it."""

        self.candidate = self._rng.choice(self._name_pool)
        self.error = None
        self.state = NewDocumentState.PROMPT_OPEN
        return self.candidate

    def cancel(self) -> None:
        if self.state is NewDocumentState.CHECKING:
            return
        self.state = NewDocumentState.IDLE
        self.candidate = None
        self.error = None

    async def confirm(self, candidate: str | None = None) -> NewDocumentState:
        """Check the candidate name and create the document if it is free."""

        if self.state not in (NewDocumentState.PROMPT_OPEN, NewDocumentState.REJECTED):
            raise RuntimeError(f"Cannot confirm a new document while {self.state.value}")
        if candidate is not None:
            self.candidate = candidate
        if not (self.candidate or "").strip():
            self.error = EMPTY_NAME_MESSAGE
            self.state = NewDocumentState.PROMPT_OPEN
            return self.state

        name = full_document_name(self.candidate or "")
        self.state = NewDocumentState.CHECKING
        if await self._store.exists(name):
            duplicate = DuplicateNameError(name)
            logger.info("Rejected new document %s: %s", name, duplicate)
            self.error = str(duplicate)
            self.state = NewDocumentState.REJECTED
            return self.state

        session = DocumentSession(name=name)
        # dirty from the start so the next autosave tick writes the empty document
        session.mark_dirty()
        self._workspace.replace_session(session)
        self.candidate = name
        self.error = None
        self.state = NewDocumentState.COMMITTED
        logger.info("Created new document %s", name)
        return self.state


__all__ = [
    "DEFAULT_NAME_POOL",
    "NewDocumentState",
    "NewDocumentWorkflow",
    "full_document_name",
]
