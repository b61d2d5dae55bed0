"""The open document and the workspace that owns it."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from document_codec import empty_document, normalize_document


@dataclass(slots=True, eq=False)
class DocumentSession:
    """In-memory record of the currently open document.

    Only code running on the editor runtime's event loop mutates a session.
    ``revision`` grows with every content change so an autosave that
    uploaded an older revision does not clear ``dirty``.
    """

    name: str
    content: dict[str, Any] = field(default_factory=empty_document)
    dirty: bool = False
    revision: int = 0

    def __post_init__(self) -> None:
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValueError("A document session needs a non-empty name")
        self.content = normalize_document(self.content)

    def mark_dirty(self) -> None:
        self.dirty = True
        self.revision += 1

    def update_content(self, content: Mapping[str, Any]) -> None:
        self.content = normalize_document(content)
        self.mark_dirty()

    def mark_persisted(self, revision: int) -> bool:
        """Clear ``dirty`` if ``revision`` is still the latest; return whether it was cleared."""

        if revision != self.revision:
            return False
        self.dirty = False
        return True


@dataclass(slots=True)
class EditorWorkspace:
    """Holds the editor-side state the lifecycle components coordinate on."""

    session: DocumentSession | None = None
    editor_visible: bool = True
    notice: str | None = None

    def replace_session(self, session: DocumentSession) -> DocumentSession | None:
        """Swap in ``session`` wholesale and return the previous one."""

        previous, self.session = self.session, session
        self.editor_visible = True
        return previous

    def notify(self, message: str) -> None:
        self.notice = message

    def take_notice(self) -> str | None:
        notice, self.notice = self.notice, None
        return notice

    def mark_dirty(self) -> None:
        if self.session is not None:
            self.session.mark_dirty()

    def update_content(self, content: Mapping[str, Any]) -> None:
        if self.session is not None:
            self.session.update_content(content)


__all__ = ["DocumentSession", "EditorWorkspace"]
