"""File extension to document format mapping."""
from __future__ import annotations

from enum import Enum
from pathlib import PurePosixPath

from errors import UnsupportedFormatError


class FormatType(str, Enum):
    DOCX = "Docx"
    DOC = "Doc"
    RTF = "Rtf"
    TXT = "Txt"
    WORDML = "WordML"
    HTML = "Html"


_FORMATS_BY_EXTENSION: dict[str, FormatType] = {
    ".docx": FormatType.DOCX,
    ".dotx": FormatType.DOCX,
    ".docm": FormatType.DOCX,
    ".dotm": FormatType.DOCX,
    ".doc": FormatType.DOC,
    ".dot": FormatType.DOC,
    ".rtf": FormatType.RTF,
    ".txt": FormatType.TXT,
    ".xml": FormatType.WORDML,
    ".html": FormatType.HTML,
}

# Extensions the file picker is allowed to open in the editor.
EDITOR_OPENABLE_EXTENSIONS = frozenset({".docx", ".doc", ".txt", ".rtf"})

DEFAULT_DOCUMENT_EXTENSION = ".docx"


def normalize_extension(value: str | None) -> str:
    ext = (value or "").strip().lower()
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    return ext


def format_of(extension: str | None) -> FormatType:
    """Return the format identifier for ``extension`` or raise UnsupportedFormatError."""

    ext = normalize_extension(extension)
    try:
        return _FORMATS_BY_EXTENSION[ext]
    except KeyError:
        raise UnsupportedFormatError(extension) from None


def format_of_name(name: str) -> FormatType:
    return format_of(PurePosixPath(name).suffix)


def is_editor_openable(extension: str | None) -> bool:
    return normalize_extension(extension) in EDITOR_OPENABLE_EXTENSIONS


def supported_extensions() -> list[str]:
    return sorted(_FORMATS_BY_EXTENSION)


__all__ = [
    "DEFAULT_DOCUMENT_EXTENSION",
    "EDITOR_OPENABLE_EXTENSIONS",
    "FormatType",
    "format_of",
    "format_of_name",
    "is_editor_openable",
    "normalize_extension",
    "supported_extensions",
]
