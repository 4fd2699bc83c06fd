"""Editor annotations and their flattening into page primitives.

Annotations arrive in the editor's coordinate system: origin at the top-left
corner of the page, y growing downwards. PDF pages grow upwards from the
bottom-left corner, so every y coordinate is flipped against the page height.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Union

from .document import PdfDocumentHandle
from .exceptions import ValidationError
from .utils import get_logger, parse_hex_color

LOGGER = get_logger("pdfsuite.annotations")

HIGHLIGHT_COLOR = "#ffff00"
HIGHLIGHT_OPACITY = 0.3


@dataclass(frozen=True)
class TextAnnotation:
    page: int
    x: float
    y: float
    text: str
    font_size: float = 16
    color: str = "#000000"
    bold: bool = False
    align: str = "left"
    opacity: float = 1.0
    rotation: float = 0.0


@dataclass(frozen=True)
class RectangleAnnotation:
    page: int
    x: float
    y: float
    width: float
    height: float
    color: str = "#000000"
    background_color: str | None = None
    stroke_width: float = 2
    opacity: float = 1.0


@dataclass(frozen=True)
class CircleAnnotation:
    page: int
    x: float
    y: float
    width: float
    height: float
    color: str = "#000000"
    background_color: str | None = None
    stroke_width: float = 2
    opacity: float = 1.0


@dataclass(frozen=True)
class LineAnnotation:
    page: int
    x: float
    y: float
    x2: float
    y2: float
    color: str = "#000000"
    stroke_width: float = 2
    opacity: float = 1.0


@dataclass(frozen=True)
class HighlightAnnotation:
    page: int
    x: float
    y: float
    width: float
    height: float
    color: str = HIGHLIGHT_COLOR
    opacity: float = HIGHLIGHT_OPACITY


@dataclass(frozen=True)
class ImageAnnotation:
    page: int
    x: float
    y: float
    width: float
    height: float
    data: bytes
    opacity: float = 1.0
    rotation: float = 0.0


Annotation = Union[
    TextAnnotation,
    RectangleAnnotation,
    CircleAnnotation,
    LineAnnotation,
    HighlightAnnotation,
    ImageAnnotation,
]


def _number(raw: Mapping[str, Any], key: str, default: float = 0.0) -> float:
    value = raw.get(key, default)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Annotation field {key!r} must be a number, got {value!r}") from exc


def _decode_image(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str) or not value:
        raise ValidationError("Image annotations require imageData")
    payload = value.split(",", 1)[1] if value.startswith("data:") else value
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Image annotation data is not valid base64") from exc


def annotation_from_dict(raw: Mapping[str, Any]) -> Annotation:
    """Build an annotation from the editor's JSON object."""

    kind = raw.get("type")
    page = int(_number(raw, "page", 1))
    x, y = _number(raw, "x"), _number(raw, "y")
    opacity = _number(raw, "opacity", 1.0)
    color = raw.get("color") or "#000000"

    if kind == "text":
        return TextAnnotation(
            page=page,
            x=x,
            y=y,
            text=str(raw.get("text") or ""),
            font_size=_number(raw, "fontSize", 16),
            color=color,
            bold=bool(raw.get("bold", False)),
            align=str(raw.get("align") or "left"),
            opacity=opacity,
            rotation=_number(raw, "rotation"),
        )
    if kind in {"rectangle", "circle"}:
        cls = RectangleAnnotation if kind == "rectangle" else CircleAnnotation
        return cls(
            page=page,
            x=x,
            y=y,
            width=_number(raw, "width"),
            height=_number(raw, "height"),
            color=color,
            background_color=raw.get("backgroundColor") or None,
            stroke_width=_number(raw, "strokeWidth", 2),
            opacity=opacity,
        )
    if kind == "line":
        return LineAnnotation(
            page=page,
            x=x,
            y=y,
            x2=_number(raw, "x2"),
            y2=_number(raw, "y2"),
            color=color,
            stroke_width=_number(raw, "strokeWidth", 2),
            opacity=opacity,
        )
    if kind == "highlight":
        return HighlightAnnotation(
            page=page,
            x=x,
            y=y,
            width=_number(raw, "width"),
            height=_number(raw, "height"),
            color=raw.get("color") or HIGHLIGHT_COLOR,
            opacity=_number(raw, "opacity", HIGHLIGHT_OPACITY),
        )
    if kind == "image":
        return ImageAnnotation(
            page=page,
            x=x,
            y=y,
            width=_number(raw, "width"),
            height=_number(raw, "height"),
            data=_decode_image(raw.get("imageData")),
            opacity=opacity,
            rotation=_number(raw, "rotation"),
        )
    raise ValidationError(f"Unknown annotation type {kind!r}")


def flatten_annotations(handle: PdfDocumentHandle, annotations: Iterable[Annotation]) -> int:
    """Draw ``annotations`` onto ``handle``; returns how many were applied.

    Annotations pointing at pages that do not exist are skipped.
    """

    applied = 0
    for annotation in annotations:
        index = annotation.page - 1
        if not 0 <= index < handle.page_count:
            LOGGER.warning("Skipping annotation on missing page %d", annotation.page)
            continue
        height = handle.page(index).height
        _draw(handle, index, height, annotation)
        applied += 1
    return applied


def _draw(handle: PdfDocumentHandle, index: int, height: float, annotation: Annotation) -> None:
    if isinstance(annotation, TextAnnotation):
        font = handle.embed_font("Helvetica-Bold" if annotation.bold else "Helvetica")
        handle.draw_text(
            index,
            annotation.text,
            x=annotation.x,
            y=height - annotation.y,
            size=annotation.font_size,
            font=font,
            color=parse_hex_color(annotation.color),
            opacity=annotation.opacity,
            rotation=-annotation.rotation,
            align=annotation.align,
        )
    elif isinstance(annotation, RectangleAnnotation):
        handle.draw_rectangle(
            index,
            annotation.x,
            height - annotation.y - annotation.height,
            annotation.width,
            annotation.height,
            fill_color=parse_hex_color(annotation.background_color) if annotation.background_color else None,
            border_color=parse_hex_color(annotation.color),
            border_width=annotation.stroke_width,
            opacity=annotation.opacity,
        )
    elif isinstance(annotation, CircleAnnotation):
        rx = annotation.width / 2
        ry = (annotation.height or annotation.width) / 2
        handle.draw_ellipse(
            index,
            annotation.x + rx,
            height - annotation.y - ry,
            rx,
            ry,
            fill_color=parse_hex_color(annotation.background_color) if annotation.background_color else None,
            border_color=parse_hex_color(annotation.color),
            border_width=annotation.stroke_width,
            opacity=annotation.opacity,
        )
    elif isinstance(annotation, LineAnnotation):
        handle.draw_line(
            index,
            annotation.x,
            height - annotation.y,
            annotation.x2,
            height - annotation.y2,
            color=parse_hex_color(annotation.color),
            thickness=annotation.stroke_width,
            opacity=annotation.opacity,
        )
    elif isinstance(annotation, HighlightAnnotation):
        handle.draw_rectangle(
            index,
            annotation.x,
            height - annotation.y - annotation.height,
            annotation.width,
            annotation.height,
            fill_color=parse_hex_color(annotation.color, (1.0, 1.0, 0.0)),
            border_color=None,
            opacity=annotation.opacity,
        )
    elif isinstance(annotation, ImageAnnotation):
        image = handle.embed_image(annotation.data)
        drawn_height = annotation.height or image.height
        handle.draw_image(
            index,
            image,
            x=annotation.x,
            y=height - annotation.y - drawn_height,
            width=annotation.width or image.width,
            height=drawn_height,
            opacity=annotation.opacity,
            rotation=-annotation.rotation,
        )


__all__ = [
    "Annotation",
    "TextAnnotation",
    "RectangleAnnotation",
    "CircleAnnotation",
    "LineAnnotation",
    "HighlightAnnotation",
    "ImageAnnotation",
    "annotation_from_dict",
    "flatten_annotations",
]
