"""
Type definitions shared across pdfsuite.

``InputFile`` is the unit every tool receives and ``ResultDescriptor`` the
unit every tool returns. Both are immutable.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path

from .utils import strip_extension

PDF_MIME = "application/pdf"
JPEG_MIME = "image/jpeg"
PNG_MIME = "image/png"
BMP_MIME = "image/bmp"
TIFF_MIME = "image/tiff"
TEXT_MIME = "text/plain"
HTML_MIME = "text/html"
JSON_MIME = "application/json"
CSV_MIME = "text/csv"
XML_MIME = "application/xml"
PPTX_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
OCTET_STREAM_MIME = "application/octet-stream"


@dataclass(frozen=True)
class InputFile:
    """
    A named, read-only byte buffer.

    Attributes:
        name: Original file name including its extension
        data: Raw file contents
        mime_type: Declared MIME type, empty when unknown
    """

    name: str
    data: bytes
    mime_type: str = ""

    @classmethod
    def from_path(cls, path: str | Path) -> "InputFile":
        file_path = Path(path)
        guessed, _ = mimetypes.guess_type(file_path.name)
        return cls(name=file_path.name, data=file_path.read_bytes(), mime_type=guessed or "")

    @property
    def stem(self) -> str:
        return strip_extension(self.name)

    @property
    def suffix(self) -> str:
        return Path(self.name).suffix.lower()

    @property
    def size(self) -> int:
        return len(self.data)

    def is_pdf(self) -> bool:
        return self.mime_type == PDF_MIME or self.suffix == ".pdf" or self.data[:5] == b"%PDF-"

    def text(self, encoding: str = "utf-8") -> str:
        return self.data.decode(encoding, errors="replace")

    def __repr__(self) -> str:
        return f"InputFile(name={self.name!r}, size={self.size}, mime_type={self.mime_type!r})"


@dataclass(frozen=True)
class ResultDescriptor:
    """
    An output artifact produced by a tool.

    Attributes:
        name: Suggested download file name
        data: Artifact bytes
        type: MIME type of ``data``
    """

    name: str
    data: bytes
    type: str

    @property
    def size(self) -> int:
        return len(self.data)

    def as_input(self) -> InputFile:
        """Return the artifact as an :class:`InputFile` so it can be fed back in."""

        return InputFile(name=self.name, data=self.data, mime_type=self.type)

    def __str__(self) -> str:
        return f"ResultDescriptor(name={self.name!r}, type={self.type!r}, size={self.size})"


def pdf_result(name: str, data: bytes) -> ResultDescriptor:
    return ResultDescriptor(name=name, data=data, type=PDF_MIME)


__all__ = [
    "InputFile",
    "ResultDescriptor",
    "pdf_result",
    "PDF_MIME",
    "JPEG_MIME",
    "PNG_MIME",
    "BMP_MIME",
    "TIFF_MIME",
    "TEXT_MIME",
    "HTML_MIME",
    "JSON_MIME",
    "CSV_MIME",
    "XML_MIME",
    "PPTX_MIME",
    "XLSX_MIME",
    "OCTET_STREAM_MIME",
]
