"""Tool options: the shared options bag and one typed record per tool family."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Mapping, Tuple

from ...core.config import Settings
from ...core.exceptions import ValidationError
from ...core.utils import parse_hex_color

DEFAULT_OPTIONS: Dict[str, Any] = {
    "password": "",
    "pages": "",
    "rotation": 90,
    "rotateMode": "all",
    "blankPagePos": 1,
    "duplicatePages": "1",
    "nUp": 2,
    "splitSize": 5,
    "splitText": "",
    "pageOrder": [],
    # images to pdf
    "pageSize": "a4",
    "orientation": "portrait",
    "margin": "small",
    # qr
    "qrText": "",
    "qrSize": 600,
    "qrErrorCorrection": "H",
    "qrIncludeText": True,
    "qrColor": "#000000",
    "qrBgColor": "#ffffff",
    # text
    "fontSize": 12,
    # pdf to image
    "quality": "high",
    "pageRange": "all",
    # security
    "oldPassword": "",
    "newPassword": "",
    "watermarkText": "CONFIDENTIAL",
    "watermarkOpacity": 30,
    "watermarkSize": 48,
    "watermarkRotation": 45,
    "watermarkColor": "#808080",
    # imaging
    "grayscaleMethod": "luminosity",
    "grayscaleQuality": "high",
    "contrastFactor": 1.5,
    # page numbers
    "pageNumberPosition": "bottom-center",
    "pageNumberStart": 1,
    "pageNumberSize": 12,
    "pageNumberFormat": "number",
    # header and footer
    "headerText": "",
    "footerText": "",
    "headerFooterSize": 10,
    "cropMargin": 50,
    "resizeTarget": "a4",
    "repairMode": "standard",
    "removeCorrupted": True,
    "ocrLanguage": "eng",
    "ocrDeskew": True,
    "ocrEnhance": True,
    "compareMode": "visual",
    "highlightColor": "red",
    "webCompression": "medium",
    "embedFonts": True,
    "removeMetadata": False,
    "metaTitle": "",
    "metaAuthor": "",
    "metaSubject": "",
    "metaKeywords": "",
    "metaCreator": "All PDF Tools",
    "viewerPageMode": "UseNone",
    "viewerPageLayout": "SinglePage",
    "viewerFitWindow": True,
    "viewerCenterWindow": True,
    "viewerHideToolbar": False,
    "viewerHideMenubar": False,
    "analyzeImages": True,
    "analyzeFonts": True,
    "analyzeText": True,
    "batchAction": "compress",
    "printColorProfile": "cmyk",
    "printBleed": 0,
    "printCropMarks": False,
    "annotations": [],
    "timestampFormat": "%Y-%m-%d %H:%M:%S",
    "timestampPosition": "bottom-right",
}

PAGE_POSITIONS = ("bottom-center", "bottom-right", "bottom-left", "top-center", "top-right", "top-left")
QR_ERROR_LEVELS = ("L", "M", "Q", "H")
RESIZE_TARGETS = ("a4", "letter", "a3", "a5")
REPAIR_MODES = ("minimal", "standard", "aggressive")
COMPARE_MODES = ("visual", "text", "both")
COMPRESSION_LEVELS = ("low", "medium", "high")
PAGE_MODES = ("UseNone", "UseOutlines", "UseThumbs", "FullScreen")
PAGE_LAYOUTS = ("SinglePage", "OneColumn", "TwoColumnLeft", "TwoColumnRight")
BATCH_ACTIONS = ("compress", "rotate", "watermark")
COLOR_PROFILES = ("cmyk", "grayscale")


def _coerce(key: str, value: Any) -> Any:
    """Coerce ``value`` to the type of the default for ``key``."""

    default = DEFAULT_OPTIONS.get(key)
    if default is None or not isinstance(value, str):
        return value
    try:
        if isinstance(default, bool):
            lowered = value.strip().lower()
            if lowered in {"1", "true", "yes", "on"}:
                return True
            if lowered in {"0", "false", "no", "off", ""}:
                return False
            raise ValueError(value)
        if isinstance(default, int):
            text = value.strip()
            return int(text) if text.lstrip("-").isdigit() else float(text)
        if isinstance(default, float):
            return float(value)
        if isinstance(default, list):
            text = value.strip()
            if text.startswith("["):
                return json.loads(text)
            return [int(part) for part in text.split(",") if part.strip()]
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid value for option {key!r}: {value!r}") from exc
    return value


_RANGE_CHECKS: Dict[str, Tuple[float, float]] = {
    "watermarkOpacity": (0, 100),
    "printBleed": (0, 20),
}


def _check(key: str, value: Any) -> None:
    """Reject values no tool could accept, as early as the option is set."""

    if key == "rotation" and isinstance(value, (int, float)) and value % 90:
        raise ValidationError("Rotation must be a multiple of 90 degrees")
    bounds = _RANGE_CHECKS.get(key)
    if bounds and isinstance(value, (int, float)) and not bounds[0] <= value <= bounds[1]:
        raise ValidationError(f"Option {key!r} must be between {bounds[0]:g} and {bounds[1]:g}")


class OptionsBag(Mapping[str, Any]):
    """Immutable view of user options merged over :data:`DEFAULT_OPTIONS`."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        merged = dict(DEFAULT_OPTIONS)
        for key, value in (values or {}).items():
            merged[key] = _coerce(key, value)
            _check(key, merged[key])
        self._values = merged

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def patch(self, **changes: Any) -> "OptionsBag":
        values = dict(self._values)
        values.update(changes)
        return OptionsBag(values)

    def overrides(self) -> Dict[str, Any]:
        """Return only the keys whose value differs from the defaults."""

        return {key: value for key, value in self._values.items() if DEFAULT_OPTIONS.get(key, object()) != value}

    def __repr__(self) -> str:
        return f"OptionsBag({self.overrides()!r})"


def _choice(bag: Mapping[str, Any], key: str, allowed: Tuple[str, ...]) -> str:
    value = bag.get(key, DEFAULT_OPTIONS.get(key))
    if value not in allowed:
        raise ValidationError(f"Option {key!r} must be one of {', '.join(allowed)}; got {value!r}")
    return value


def _positive(bag: Mapping[str, Any], key: str) -> float:
    try:
        value = float(bag.get(key, DEFAULT_OPTIONS.get(key)))
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Option {key!r} must be a number") from exc
    if value <= 0:
        raise ValidationError(f"Option {key!r} must be greater than zero")
    return value


@dataclass(frozen=True)
class ToolOptions:
    """Base record for tools that take no options."""

    @classmethod
    def from_bag(cls, bag: Mapping[str, Any], settings: Settings) -> "ToolOptions":
        return cls()


@dataclass(frozen=True)
class PasswordOptions(ToolOptions):
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(password=str(bag.get("password") or ""))


@dataclass(frozen=True)
class ProtectOptions(ToolOptions):
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        password = str(bag.get("password") or "")
        if len(password) < settings.min_password_length:
            raise ValidationError(f"Password must be at least {settings.min_password_length} characters long.")
        return cls(password=password)


@dataclass(frozen=True)
class ChangePasswordOptions(ToolOptions):
    old_password: str = ""
    new_password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        old_password = str(bag.get("oldPassword") or bag.get("password") or "")
        new_password = str(bag.get("newPassword") or "")
        if not old_password:
            raise ValidationError("The current password is required.")
        if len(new_password) < settings.min_password_length:
            raise ValidationError(f"New password must be at least {settings.min_password_length} characters long.")
        return cls(old_password=old_password, new_password=new_password)


@dataclass(frozen=True)
class PageSelectionOptions(ToolOptions):
    pages: str = ""
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(pages=str(bag.get("pages") or ""), password=str(bag.get("password") or ""))


@dataclass(frozen=True)
class SplitTextOptions(ToolOptions):
    ranges: str = ""
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        ranges = str(bag.get("splitText") or bag.get("pages") or "")
        return cls(ranges=ranges, password=str(bag.get("password") or ""))


@dataclass(frozen=True)
class SplitBySizeOptions(ToolOptions):
    max_megabytes: float = 5.0
    password: str = ""

    @property
    def max_bytes(self) -> int:
        return int(self.max_megabytes * 1024 * 1024)

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(max_megabytes=_positive(bag, "splitSize"), password=str(bag.get("password") or ""))


@dataclass(frozen=True)
class ReorderOptions(ToolOptions):
    page_order: Tuple[int, ...] = ()
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        order = bag.get("pageOrder") or []
        if isinstance(order, str):
            order = _coerce("pageOrder", order)
        return cls(page_order=tuple(order), password=str(bag.get("password") or ""))


@dataclass(frozen=True)
class RotateOptions(ToolOptions):
    angle: int = 90
    mode: str = "all"
    pages: str = ""
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        try:
            angle = int(bag.get("rotation", 90))
        except (TypeError, ValueError) as exc:
            raise ValidationError("Rotation must be a whole number of degrees") from exc
        if angle % 90 != 0:
            raise ValidationError("Rotation must be a multiple of 90 degrees")
        return cls(
            angle=angle,
            mode=_choice(bag, "rotateMode", ("all", "specific")),
            pages=str(bag.get("pages") or ""),
            password=str(bag.get("password") or ""),
        )


@dataclass(frozen=True)
class BlankPageOptions(ToolOptions):
    position: int = 1
    page_size: str = "a4"
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        try:
            position = int(bag.get("blankPagePos", 1))
        except (TypeError, ValueError) as exc:
            raise ValidationError("Blank page position must be a whole number") from exc
        page_size = bag.get("pageSize") if bag.get("pageSize") in RESIZE_TARGETS else "a4"
        return cls(position=position, page_size=page_size, password=str(bag.get("password") or ""))


@dataclass(frozen=True)
class DuplicateOptions(ToolOptions):
    pages: str = "1"
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(pages=str(bag.get("duplicatePages") or ""), password=str(bag.get("password") or ""))


@dataclass(frozen=True)
class NUpOptions(ToolOptions):
    per_sheet: int = 2
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        try:
            per_sheet = int(bag.get("nUp", 2))
        except (TypeError, ValueError) as exc:
            raise ValidationError("Pages per sheet must be a whole number") from exc
        if per_sheet not in (2, 4, 6, 8, 9, 16):
            raise ValidationError("Pages per sheet must be one of 2, 4, 6, 8, 9 or 16")
        return cls(per_sheet=per_sheet, password=str(bag.get("password") or ""))


@dataclass(frozen=True)
class ImageLayoutOptions(ToolOptions):
    page_size: str = "a4"
    orientation: str = "portrait"
    margin: str = "small"

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(
            page_size=_choice(bag, "pageSize", ("a4", "letter", "fit")),
            orientation=_choice(bag, "orientation", ("portrait", "landscape")),
            margin=_choice(bag, "margin", ("none", "small", "big")),
        )


@dataclass(frozen=True)
class TextDocumentOptions(ToolOptions):
    font_size: float = 12
    font: str = "Helvetica"

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(font_size=_positive(bag, "fontSize"), font=settings.default_font)


@dataclass(frozen=True)
class QrOptions(ToolOptions):
    text: str = ""
    size: int = 600
    error_correction: str = "H"
    include_text: bool = True
    color: str = "#000000"
    background: str = "#ffffff"

    @classmethod
    def from_bag(cls, bag, settings):
        text = str(bag.get("qrText") or "")
        if not text.strip():
            raise ValidationError("Please enter text or a URL for the QR code.")
        return cls(
            text=text,
            size=int(_positive(bag, "qrSize")),
            error_correction=_choice(bag, "qrErrorCorrection", QR_ERROR_LEVELS),
            include_text=bool(bag.get("qrIncludeText", True)),
            color=str(bag.get("qrColor") or "#000000"),
            background=str(bag.get("qrBgColor") or "#ffffff"),
        )


@dataclass(frozen=True)
class RasterExportOptions(ToolOptions):
    quality: str = "high"
    page_range: str = "all"
    pages: str = ""
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(
            quality=_choice(bag, "quality", ("low", "medium", "high")),
            page_range=_choice(bag, "pageRange", ("all", "specific")),
            pages=str(bag.get("pages") or ""),
            password=str(bag.get("password") or ""),
        )


@dataclass(frozen=True)
class WatermarkOptions(ToolOptions):
    text: str = "CONFIDENTIAL"
    opacity: float = 0.3
    size: float = 48
    rotation: float = 45
    color: Tuple[float, float, float] = (0.5, 0.5, 0.5)
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        text = str(bag.get("watermarkText") or "")
        if not text.strip():
            raise ValidationError("Watermark text must not be empty")
        try:
            opacity = float(bag.get("watermarkOpacity", 30))
            rotation = float(bag.get("watermarkRotation", 45))
        except (TypeError, ValueError) as exc:
            raise ValidationError("Watermark opacity and rotation must be numbers") from exc
        if not 0 <= opacity <= 100:
            raise ValidationError("Watermark opacity must be between 0 and 100")
        return cls(
            text=text,
            opacity=opacity / 100,
            size=_positive(bag, "watermarkSize"),
            rotation=rotation,
            color=parse_hex_color(bag.get("watermarkColor"), (0.5, 0.5, 0.5)),
            password=str(bag.get("password") or ""),
        )


@dataclass(frozen=True)
class PageNumberOptions(ToolOptions):
    position: str = "bottom-center"
    start: int = 1
    size: float = 12
    format: str = "number"
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        try:
            start = int(bag.get("pageNumberStart", 1))
        except (TypeError, ValueError) as exc:
            raise ValidationError("Starting page number must be a whole number") from exc
        return cls(
            position=_choice(bag, "pageNumberPosition", PAGE_POSITIONS),
            start=start,
            size=_positive(bag, "pageNumberSize"),
            format=_choice(bag, "pageNumberFormat", ("number", "page-of-total")),
            password=str(bag.get("password") or ""),
        )


@dataclass(frozen=True)
class HeaderFooterOptions(ToolOptions):
    header: str = ""
    footer: str = ""
    size: float = 10
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        header = str(bag.get("headerText") or "")
        footer = str(bag.get("footerText") or "")
        if not header.strip() and not footer.strip():
            raise ValidationError("Enter header or footer text")
        return cls(header=header, footer=footer, size=_positive(bag, "headerFooterSize"), password=str(bag.get("password") or ""))


@dataclass(frozen=True)
class CropOptions(ToolOptions):
    margin: float = 50
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        try:
            margin = float(bag.get("cropMargin", 50))
        except (TypeError, ValueError) as exc:
            raise ValidationError("Crop margin must be a number") from exc
        if margin < 0:
            raise ValidationError("Crop margin must not be negative")
        return cls(margin=margin, password=str(bag.get("password") or ""))


@dataclass(frozen=True)
class ResizeOptions(ToolOptions):
    target: str = "a4"
    quality: str = "high"
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(
            target=_choice(bag, "resizeTarget", RESIZE_TARGETS),
            quality=_choice(bag, "quality", ("low", "medium", "high")),
            password=str(bag.get("password") or ""),
        )


@dataclass(frozen=True)
class MetadataOptions(ToolOptions):
    title: str = ""
    author: str = ""
    subject: str = ""
    keywords: str = ""
    creator: str = ""
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(
            title=str(bag.get("metaTitle") or ""),
            author=str(bag.get("metaAuthor") or ""),
            subject=str(bag.get("metaSubject") or ""),
            keywords=str(bag.get("metaKeywords") or ""),
            creator=str(bag.get("metaCreator") or ""),
            password=str(bag.get("password") or ""),
        )


@dataclass(frozen=True)
class ViewerOptions(ToolOptions):
    page_mode: str = "UseNone"
    page_layout: str = "SinglePage"
    fit_window: bool = True
    center_window: bool = True
    hide_toolbar: bool = False
    hide_menubar: bool = False
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(
            page_mode=_choice(bag, "viewerPageMode", PAGE_MODES),
            page_layout=_choice(bag, "viewerPageLayout", PAGE_LAYOUTS),
            fit_window=bool(bag.get("viewerFitWindow")),
            center_window=bool(bag.get("viewerCenterWindow")),
            hide_toolbar=bool(bag.get("viewerHideToolbar")),
            hide_menubar=bool(bag.get("viewerHideMenubar")),
            password=str(bag.get("password") or ""),
        )


@dataclass(frozen=True)
class AnnotationOptions(ToolOptions):
    annotations: Tuple[Mapping[str, Any], ...] = ()
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        raw = bag.get("annotations") or []
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except ValueError as exc:
                raise ValidationError("Annotations must be a JSON list") from exc
        if not isinstance(raw, (list, tuple)):
            raise ValidationError("Annotations must be a list")
        return cls(annotations=tuple(raw), password=str(bag.get("password") or ""))


@dataclass(frozen=True)
class TimestampOptions(ToolOptions):
    format: str = "%Y-%m-%d %H:%M:%S"
    position: str = "bottom-right"
    size: float = 10
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(
            format=str(bag.get("timestampFormat") or DEFAULT_OPTIONS["timestampFormat"]),
            position=_choice(bag, "timestampPosition", PAGE_POSITIONS),
            size=_positive(bag, "headerFooterSize"),
            password=str(bag.get("password") or ""),
        )


@dataclass(frozen=True)
class GrayscaleOptions(ToolOptions):
    method: str = "luminosity"
    quality: str = "high"
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(
            method=_choice(bag, "grayscaleMethod", ("luminosity", "average", "desaturate")),
            quality=_choice(bag, "grayscaleQuality", ("low", "medium", "high")),
            password=str(bag.get("password") or ""),
        )


@dataclass(frozen=True)
class ContrastOptions(ToolOptions):
    factor: float = 1.5
    quality: str = "high"
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(
            factor=_positive(bag, "contrastFactor"),
            quality=_choice(bag, "quality", ("low", "medium", "high")),
            password=str(bag.get("password") or ""),
        )


@dataclass(frozen=True)
class OcrOptions(ToolOptions):
    language: str = "eng"
    deskew: bool = True
    enhance: bool = True
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(
            language=_choice(bag, "ocrLanguage", ("eng", "spa", "fra", "deu", "chi", "jpn")),
            deskew=bool(bag.get("ocrDeskew")),
            enhance=bool(bag.get("ocrEnhance")),
            password=str(bag.get("password") or ""),
        )


@dataclass(frozen=True)
class PrintOptions(ToolOptions):
    color_profile: str = "cmyk"
    bleed: float = 0
    crop_marks: bool = False
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        try:
            bleed = float(bag.get("printBleed", 0))
        except (TypeError, ValueError) as exc:
            raise ValidationError("Bleed must be a number") from exc
        if not 0 <= bleed <= 20:
            raise ValidationError("Bleed must be between 0 and 20 points")
        return cls(
            color_profile=_choice(bag, "printColorProfile", COLOR_PROFILES),
            bleed=bleed,
            crop_marks=bool(bag.get("printCropMarks")),
            password=str(bag.get("password") or ""),
        )


@dataclass(frozen=True)
class RepairOptions(ToolOptions):
    mode: str = "standard"
    remove_corrupted: bool = True
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(
            mode=_choice(bag, "repairMode", REPAIR_MODES),
            remove_corrupted=bool(bag.get("removeCorrupted")),
            password=str(bag.get("password") or ""),
        )


@dataclass(frozen=True)
class CompareOptions(ToolOptions):
    mode: str = "visual"
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(mode=_choice(bag, "compareMode", COMPARE_MODES), password=str(bag.get("password") or ""))


@dataclass(frozen=True)
class WebOptimizeOptions(ToolOptions):
    compression: str = "medium"
    embed_fonts: bool = True
    remove_metadata: bool = False
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(
            compression=_choice(bag, "webCompression", COMPRESSION_LEVELS),
            embed_fonts=bool(bag.get("embedFonts")),
            remove_metadata=bool(bag.get("removeMetadata")),
            password=str(bag.get("password") or ""),
        )


@dataclass(frozen=True)
class AnalyzeOptions(ToolOptions):
    images: bool = True
    fonts: bool = True
    text: bool = True
    password: str = ""

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(
            images=bool(bag.get("analyzeImages")),
            fonts=bool(bag.get("analyzeFonts")),
            text=bool(bag.get("analyzeText")),
            password=str(bag.get("password") or ""),
        )


@dataclass(frozen=True)
class BatchOptions(ToolOptions):
    action: str = "compress"

    @classmethod
    def from_bag(cls, bag, settings):
        return cls(action=_choice(bag, "batchAction", BATCH_ACTIONS))


__all__ = [
    "DEFAULT_OPTIONS",
    "OptionsBag",
    "ToolOptions",
    "PasswordOptions",
    "ProtectOptions",
    "ChangePasswordOptions",
    "PageSelectionOptions",
    "SplitTextOptions",
    "SplitBySizeOptions",
    "ReorderOptions",
    "RotateOptions",
    "BlankPageOptions",
    "DuplicateOptions",
    "NUpOptions",
    "ImageLayoutOptions",
    "TextDocumentOptions",
    "QrOptions",
    "RasterExportOptions",
    "WatermarkOptions",
    "PageNumberOptions",
    "HeaderFooterOptions",
    "CropOptions",
    "ResizeOptions",
    "MetadataOptions",
    "ViewerOptions",
    "AnnotationOptions",
    "TimestampOptions",
    "GrayscaleOptions",
    "ContrastOptions",
    "OcrOptions",
    "PrintOptions",
    "RepairOptions",
    "CompareOptions",
    "WebOptimizeOptions",
    "AnalyzeOptions",
    "BatchOptions",
]
