"""Raster bridge between PDF pages and pixel surfaces.

Pages are rendered with PyMuPDF, pixels are handled as Pillow images and
per-pixel transforms are vectorised with numpy.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Callable, Iterable, Protocol, Sequence, Tuple

import fitz
import numpy as np
from PIL import Image, ImageOps

from .exceptions import CorruptError, PasswordError, RenderError, ValidationError
from .utils import get_logger

LOGGER = get_logger("pdfsuite.raster")

QUALITY_SCALES = {"low": 1.5, "medium": 2.0, "high": 2.5}
DEFAULT_SCALE = 2.0
DEFAULT_JPEG_QUALITY = 90

IMAGE_FORMATS = {
    "jpeg": ("JPEG", "jpg", "image/jpeg"),
    "jpg": ("JPEG", "jpg", "image/jpeg"),
    "png": ("PNG", "png", "image/png"),
    "bmp": ("BMP", "bmp", "image/bmp"),
    "tiff": ("TIFF", "tiff", "image/tiff"),
    "webp": ("WEBP", "webp", "image/webp"),
}

Channels = Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]
PixelTransform = Callable[[np.ndarray, np.ndarray, np.ndarray, np.ndarray], Channels]


@dataclass(frozen=True)
class Surface:
    """An RGB or RGBA pixel buffer."""

    image: Image.Image

    @classmethod
    def from_bytes(cls, data: bytes, *, name: str = "image") -> "Surface":
        try:
            with Image.open(BytesIO(data)) as image:
                image.load()
                converted = image.convert("RGBA" if "A" in image.getbands() else "RGB")
        except (OSError, ValueError) as exc:
            raise RenderError(f"Unable to decode {name}: {exc}", file_name=name) from exc
        return cls(converted)

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def mode(self) -> str:
        return self.image.mode

    @property
    def has_alpha(self) -> bool:
        return "A" in self.image.getbands()

    @property
    def pixels(self) -> np.ndarray:
        return np.asarray(self.image)


class RasterBackend(Protocol):
    def page_count(self, pdf_bytes: bytes, password: str | None = None) -> int: ...

    def render_page(
        self,
        pdf_bytes: bytes,
        page_index: int,
        scale: float,
        password: str | None = None,
    ) -> Surface: ...


class PyMuPDFBackend:
    """Render pages with PyMuPDF."""

    def _open(self, pdf_bytes: bytes, password: str | None) -> fitz.Document:
        try:
            document = fitz.open(stream=pdf_bytes, filetype="pdf")
        except Exception as exc:
            raise CorruptError(f"Unable to open PDF for rendering: {exc}") from exc
        if document.needs_pass:
            if not password or not document.authenticate(password):
                document.close()
                raise PasswordError()
        return document

    def page_count(self, pdf_bytes: bytes, password: str | None = None) -> int:
        document = self._open(pdf_bytes, password)
        try:
            return document.page_count
        finally:
            document.close()

    def render_page(
        self,
        pdf_bytes: bytes,
        page_index: int,
        scale: float,
        password: str | None = None,
    ) -> Surface:
        if scale <= 0:
            raise ValidationError("Render scale must be positive")
        document = self._open(pdf_bytes, password)
        try:
            if not 0 <= page_index < document.page_count:
                raise RenderError(f"Page {page_index + 1} does not exist", page_index=page_index)
            page = document.load_page(page_index)
            pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
            image = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
        except (RenderError, ValidationError):
            raise
        except Exception as exc:
            raise RenderError(str(exc), page_index=page_index) from exc
        finally:
            document.close()
        return Surface(image)


_DEFAULT_BACKEND = PyMuPDFBackend()


def default_backend() -> RasterBackend:
    return _DEFAULT_BACKEND


def render_page_to_surface(
    pdf_bytes: bytes,
    page_index: int,
    scale: float = DEFAULT_SCALE,
    *,
    backend: RasterBackend | None = None,
    password: str | None = None,
) -> Surface:
    backend = backend or _DEFAULT_BACKEND
    LOGGER.debug("Rendering page %d at scale %.2f", page_index + 1, scale)
    return backend.render_page(pdf_bytes, page_index, scale, password)


def render_all(
    pdf_bytes: bytes,
    scale: float = DEFAULT_SCALE,
    *,
    backend: RasterBackend | None = None,
    password: str | None = None,
    name: str = "document",
) -> list[Surface]:
    backend = backend or _DEFAULT_BACKEND
    surfaces = []
    for index in range(backend.page_count(pdf_bytes, password)):
        try:
            surfaces.append(backend.render_page(pdf_bytes, index, scale, password))
        except RenderError as exc:
            raise RenderError(exc.message, file_name=name, page_index=index) from exc
    return surfaces


def rasterize_svg(data: bytes, scale: float = DEFAULT_SCALE, *, name: str = "image.svg") -> Tuple[bytes, float, float]:
    """Render an SVG document to PNG; returns the PNG and its size in points."""

    try:
        document = fitz.open(stream=data, filetype="svg")
    except Exception as exc:
        raise RenderError(f"Unable to parse SVG {name}: {exc}", file_name=name) from exc
    try:
        page = document.load_page(0)
        pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=True)
        return pix.tobytes("png"), float(page.rect.width), float(page.rect.height)
    except Exception as exc:
        raise RenderError(f"Unable to render SVG {name}: {exc}", file_name=name) from exc
    finally:
        document.close()


def choose_format(surface: Surface, prefer_photo: bool = True) -> str:
    """Pick ``jpeg`` for opaque photographic output and ``png`` otherwise."""

    return "png" if surface.has_alpha or not prefer_photo else "jpeg"


def _flatten_alpha(image: Image.Image) -> Image.Image:
    if "A" not in image.getbands():
        return image.convert("RGB")
    background = Image.new("RGB", image.size, (255, 255, 255))
    background.paste(image, mask=image.getchannel("A"))
    return background


def surface_to_image_bytes(surface: Surface, fmt: str = "png", quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    try:
        pil_format = IMAGE_FORMATS[fmt.lower()][0]
    except KeyError as exc:
        raise ValidationError(f"Unsupported image format {fmt!r}") from exc
    image = surface.image
    if pil_format in {"JPEG", "BMP"}:
        image = _flatten_alpha(image)
    buffer = BytesIO()
    params = {"quality": int(quality)} if pil_format in {"JPEG", "WEBP"} else {}
    image.save(buffer, format=pil_format, **params)
    return buffer.getvalue()


def _channels(surface: Surface) -> Channels:
    rgba = np.asarray(surface.image.convert("RGBA"), dtype=np.float64)
    return rgba[..., 0], rgba[..., 1], rgba[..., 2], rgba[..., 3]


def apply_pixel_transform(surface: Surface, fn: PixelTransform) -> Surface:
    """Apply ``fn(r, g, b, a) -> (r, g, b, a)`` to every pixel.

    Channels are float arrays in ``0..255``; results are rounded and clamped.
    The output keeps the surface's alpha channel only if it had one.
    """

    r, g, b, a = fn(*_channels(surface))
    stacked = np.stack([np.broadcast_to(channel, surface.pixels.shape[:2]) for channel in (r, g, b, a)], axis=-1)
    data = np.clip(np.rint(stacked), 0, 255).astype(np.uint8)
    image = Image.fromarray(data)
    return Surface(image if surface.has_alpha else image.convert("RGB"))


def _luminosity(r, g, b, a):
    value = 0.299 * r + 0.587 * g + 0.114 * b
    return value, value, value, a


def _average(r, g, b, a):
    value = (r + g + b) / 3.0
    return value, value, value, a


def _desaturate(r, g, b, a):
    value = (np.maximum(np.maximum(r, g), b) + np.minimum(np.minimum(r, g), b)) / 2.0
    return value, value, value, a


GRAYSCALE_METHODS: dict[str, PixelTransform] = {
    "luminosity": _luminosity,
    "average": _average,
    "desaturate": _desaturate,
}


def grayscale(surface: Surface, method: str = "luminosity") -> Surface:
    try:
        transform = GRAYSCALE_METHODS[method]
    except KeyError as exc:
        raise ValidationError(f"Unknown grayscale method {method!r}") from exc
    return apply_pixel_transform(surface, transform)


def enhance_contrast(surface: Surface, factor: float = 1.5) -> Surface:
    """Stretch every channel away from mid-grey by ``factor``."""

    def stretch(r, g, b, a):
        return (r - 128) * factor + 128, (g - 128) * factor + 128, (b - 128) * factor + 128, a

    return apply_pixel_transform(surface, stretch)


def soft_proof_cmyk(surface: Surface) -> Surface:
    """Round-trip through CMYK so out-of-gamut colours look as they would print."""

    return Surface(_flatten_alpha(surface.image).convert("CMYK").convert("RGB"))


def _skew_score(binary: Image.Image, angle: float) -> float:
    rotated = binary.rotate(angle, resample=Image.BICUBIC, expand=False, fillcolor=0)
    # corners uncovered by the rotation are ignored
    inset_x, inset_y = rotated.width // 10, rotated.height // 10
    rotated = rotated.crop((inset_x, inset_y, rotated.width - inset_x, rotated.height - inset_y))
    profile = np.asarray(rotated, dtype=np.float64).sum(axis=1)
    return float(np.var(profile))


def estimate_skew(surface: Surface, max_angle: float = 5.0, step: float = 0.5) -> float:
    """Return the rotation (degrees, counter-clockwise) that best levels text lines.

    Uses a projection profile: the angle whose row sums have the highest
    variance wins. Returns ``0.0`` for blank pages.
    """

    gray = ImageOps.grayscale(_flatten_alpha(surface.image))
    if max(gray.size) > 1000:
        gray.thumbnail((1000, 1000))
    ink = gray.point(lambda value: 255 if value < 128 else 0)
    if not np.asarray(ink).any():
        return 0.0
    best_angle = 0.0
    best_score = _skew_score(ink, 0.0)
    steps = int(round(max_angle / step))
    for offset in range(-steps, steps + 1):
        angle = offset * step
        if angle == 0:
            continue
        score = _skew_score(ink, angle)
        if score > best_score * 1.0001:
            best_angle, best_score = angle, score
    return best_angle


def deskew(surface: Surface, max_angle: float = 5.0) -> Tuple[Surface, float]:
    angle = estimate_skew(surface, max_angle)
    if angle == 0:
        return surface, 0.0
    fill = (255, 255, 255, 0) if surface.has_alpha else (255, 255, 255)
    rotated = surface.image.rotate(angle, resample=Image.BICUBIC, expand=False, fillcolor=fill)
    LOGGER.debug("Deskewed surface by %.1f degrees", angle)
    return Surface(rotated), angle


def stitch_vertical(surfaces: Sequence[Surface], background: Iterable[int] = (255, 255, 255)) -> Surface:
    """Stack surfaces top to bottom, horizontally centred."""

    if not surfaces:
        raise ValidationError("Nothing to stitch")
    width = max(surface.width for surface in surfaces)
    height = sum(surface.height for surface in surfaces)
    canvas = Image.new("RGB", (width, height), tuple(background))
    top = 0
    for surface in surfaces:
        canvas.paste(_flatten_alpha(surface.image), ((width - surface.width) // 2, top))
        top += surface.height
    return Surface(canvas)


def _on_white(image: Image.Image, size: Tuple[int, int]) -> Image.Image:
    canvas = Image.new("RGB", size, (255, 255, 255))
    canvas.paste(_flatten_alpha(image), (0, 0))
    return canvas


def difference_ratio(first: Surface, second: Surface) -> float:
    """Share of pixels that differ between two surfaces (sizes are aligned first)."""

    size = (max(first.width, second.width), max(first.height, second.height))
    left = np.asarray(_on_white(first.image, size), dtype=np.int16)
    right = np.asarray(_on_white(second.image, size), dtype=np.int16)
    changed = np.abs(left - right).max(axis=-1) > 16
    return float(changed.mean())


__all__ = [
    "Surface",
    "RasterBackend",
    "PyMuPDFBackend",
    "QUALITY_SCALES",
    "DEFAULT_SCALE",
    "DEFAULT_JPEG_QUALITY",
    "IMAGE_FORMATS",
    "GRAYSCALE_METHODS",
    "default_backend",
    "render_page_to_surface",
    "render_all",
    "rasterize_svg",
    "choose_format",
    "surface_to_image_bytes",
    "apply_pixel_transform",
    "grayscale",
    "enhance_contrast",
    "soft_proof_cmyk",
    "estimate_skew",
    "deskew",
    "stitch_vertical",
    "difference_ratio",
]
