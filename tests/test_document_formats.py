from __future__ import annotations

import pytest

from document_formats import FormatType, format_of, format_of_name, is_editor_openable
from errors import UnsupportedFormatError


@pytest.mark.parametrize(
    ("extension", "expected"),
    [
        (".docx", FormatType.DOCX),
        (".dotx", FormatType.DOCX),
        (".docm", FormatType.DOCX),
        (".dotm", FormatType.DOCX),
        (".doc", FormatType.DOC),
        (".dot", FormatType.DOC),
        (".rtf", FormatType.RTF),
        (".txt", FormatType.TXT),
        (".xml", FormatType.WORDML),
        (".html", FormatType.HTML),
    ],
)
def test_format_of_supported_extensions(extension, expected):
    assert format_of(extension) is expected
    assert format_of(extension.upper()) is expected


@pytest.mark.parametrize("extension", [".pdf", ".htm", "", None, ".docx.bak", "docx2"])
def test_format_of_rejects_unknown_extensions(extension):
    with pytest.raises(UnsupportedFormatError):
        format_of(extension)


def test_format_of_name_uses_suffix():
    assert format_of_name("Reports/Q1.Docx") is FormatType.DOCX
    with pytest.raises(UnsupportedFormatError):
        format_of_name("archive.zip")


def test_editor_openable_subset():
    assert all(is_editor_openable(ext) for ext in (".docx", ".doc", ".txt", ".RTF"))
    assert not is_editor_openable(".pdf")
    assert not is_editor_openable(".html")
