"""Conversion between stored document bytes and the editor's JSON model.

The editor works on a small JSON structure::

    {"paragraphs": [{"text": "Hello", "style": "Heading 1"}, ...]}

Stored blobs are decoded into that structure according to their format and
the editor content is always written back as DOCX.
"""
from __future__ import annotations

import io
import json
import logging
from typing import Any, Mapping

from docx import Document as DocxDocument
from docx.enum.style import WD_STYLE_TYPE

from document_formats import FormatType
from errors import DocumentConversionError

logger = logging.getLogger(__name__)

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_DOCX_FAMILY = {FormatType.DOCX}
_ZIP_MAGIC = b"PK\x03\x04"


def empty_document() -> dict[str, Any]:
    return {"paragraphs": []}


def _paragraph(text: str, style: str | None = None) -> dict[str, Any]:
    return {"text": text, "style": style}


def normalize_document(document: Mapping[str, Any] | None) -> dict[str, Any]:
    """Coerce loosely shaped editor payloads into the canonical structure."""

    if not document:
        return empty_document()
    raw = document.get("paragraphs")
    if not isinstance(raw, list):
        raise DocumentConversionError("Editor document must contain a 'paragraphs' list")

    paragraphs: list[dict[str, Any]] = []
    for item in raw:
        if isinstance(item, str):
            paragraphs.append(_paragraph(item))
        elif isinstance(item, Mapping):
            style = item.get("style")
            paragraphs.append(_paragraph(str(item.get("text") or ""), str(style) if style else None))
        else:
            raise DocumentConversionError(f"Unexpected paragraph entry: {item!r}")
    return {"paragraphs": paragraphs}


def text_to_document(text: str) -> dict[str, Any]:
    if not text:
        return empty_document()
    return {"paragraphs": [_paragraph(line) for line in text.splitlines()]}


def apply_text(document: Mapping[str, Any] | None, text: str) -> dict[str, Any]:
    """Replace paragraph texts from ``text``, keeping styles of paragraphs by position."""

    previous = normalize_document(document)["paragraphs"]
    updated = text_to_document(text)
    for index, item in enumerate(updated["paragraphs"]):
        if index < len(previous):
            item["style"] = previous[index]["style"]
    return updated


def document_to_text(document: Mapping[str, Any] | None) -> str:
    paragraphs = normalize_document(document)["paragraphs"]
    return "\n".join(item["text"] for item in paragraphs)


def _decode_docx(data: bytes) -> dict[str, Any]:
    try:
        docx = DocxDocument(io.BytesIO(data))
    except Exception as exc:
        raise DocumentConversionError(f"Could not read DOCX content: {exc}") from exc

    paragraphs = []
    for para in docx.paragraphs:
        style = para.style.name if para.style is not None else None
        paragraphs.append(_paragraph(para.text, style))
    return {"paragraphs": paragraphs}


def _decode_text(data: bytes) -> dict[str, Any]:
    return text_to_document(data.decode("utf-8", errors="replace"))


def decode_document(data: bytes, format_type: FormatType) -> dict[str, Any]:
    """Turn stored bytes into editor JSON.

    Empty blobs (documents created but never edited) decode to an empty
    document regardless of the format. Zip content is read as DOCX.
    """

    if not data:
        return empty_document()
    # autosave writes DOCX under the document's own name, whatever its extension
    if format_type in _DOCX_FAMILY or data.startswith(_ZIP_MAGIC):
        return _decode_docx(data)
    if format_type is FormatType.TXT:
        return _decode_text(data)
    raise DocumentConversionError(f"Conversion from {format_type.value} is not available")


def encode_docx(document: Mapping[str, Any] | None) -> bytes:
    """Serialize editor JSON to DOCX bytes."""

    content = normalize_document(document)
    docx = DocxDocument()
    known_styles = {style.name for style in docx.styles if style.type == WD_STYLE_TYPE.PARAGRAPH}
    for item in content["paragraphs"]:
        style = item.get("style")
        if style and style not in known_styles:
            logger.debug("Dropping unknown paragraph style %s", style)
            style = None
        docx.add_paragraph(item["text"], style=style)

    buffer = io.BytesIO()
    docx.save(buffer)
    return buffer.getvalue()


def dumps_document(document: Mapping[str, Any]) -> str:
    return json.dumps(normalize_document(document), ensure_ascii=False)


__all__ = [
    "DOCX_CONTENT_TYPE",
    "apply_text",
    "decode_document",
    "document_to_text",
    "dumps_document",
    "empty_document",
    "encode_docx",
    "normalize_document",
    "text_to_document",
]
