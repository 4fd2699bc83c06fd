"""
Custom exceptions for pdfsuite.

Every error that leaves :func:`pdfsuite.dispatch` derives from
:class:`ProcessingError` and carries a message fit to show to an end user.
"""

from __future__ import annotations


class ProcessingError(Exception):
    """Base exception for all pdfsuite errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "The document could not be processed."


class PasswordError(ProcessingError):
    """Raised when a document is encrypted and the password is missing or wrong."""

    @property
    def default_message(self) -> str:
        return "This PDF is password protected. Please supply the correct password."


class CorruptError(ProcessingError):
    """Raised when input bytes are not a recognisable PDF structure."""

    @property
    def default_message(self) -> str:
        return "The file is damaged or is not a valid PDF."


class AuthenticationError(ProcessingError):
    """Raised when an encrypted envelope fails its integrity check."""

    @property
    def default_message(self) -> str:
        return "Incorrect password."


class RenderError(ProcessingError):
    """Raised when a page or image cannot be rasterised or decoded."""

    def __init__(self, message: str = "", *, file_name: str | None = None, page_index: int | None = None) -> None:
        self.file_name = file_name
        self.page_index = page_index
        super().__init__(message)

    @property
    def default_message(self) -> str:
        location = self.file_name or "document"
        if self.page_index is not None:
            return f"Failed to render page {self.page_index + 1} of {location}."
        return f"Failed to render {location}."


class ValidationError(ProcessingError):
    """Raised when caller supplied files or options violate a precondition."""

    @property
    def default_message(self) -> str:
        return "Invalid options for this tool."


class UnsupportedFormatError(ProcessingError):
    """Raised for input formats that are explicitly not handled."""

    @property
    def default_message(self) -> str:
        return "This file format is not supported."


class UnsupportedToolError(ProcessingError):
    """Raised when a tool identifier is not part of the catalog."""

    def __init__(self, tool_id: str) -> None:
        self.tool_id = tool_id
        super().__init__(f"Unknown tool: {tool_id!r}")


class DocumentStateError(ProcessingError):
    """Raised when a document handle is used after it has been saved."""

    @property
    def default_message(self) -> str:
        return "The document has already been saved and can no longer be modified."


__all__ = [
    "ProcessingError",
    "PasswordError",
    "CorruptError",
    "AuthenticationError",
    "RenderError",
    "ValidationError",
    "UnsupportedFormatError",
    "UnsupportedToolError",
    "DocumentStateError",
]
