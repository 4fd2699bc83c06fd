"""In-memory PDF toolkit: merge, split, convert, secure and edit documents."""

from __future__ import annotations

from .catalog import CATALOG, ToolInfo, get_tool_info, is_advertised
from .core.config import Settings
from .core.document import PdfDocumentHandle
from .core.exceptions import (
    AuthenticationError,
    CorruptError,
    DocumentStateError,
    PasswordError,
    ProcessingError,
    RenderError,
    UnsupportedFormatError,
    UnsupportedToolError,
    ValidationError,
)
from .core.types import InputFile, ResultDescriptor
from .dispatcher import dispatch, is_implemented
from .tools import load_builtin_plugins
from .tools.common.pipeline import ToolRegistry, register_tool, registry

load_builtin_plugins()

__all__ = [
    "dispatch",
    "is_implemented",
    "CATALOG",
    "ToolInfo",
    "get_tool_info",
    "is_advertised",
    "Settings",
    "InputFile",
    "ResultDescriptor",
    "PdfDocumentHandle",
    "ToolRegistry",
    "registry",
    "register_tool",
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
