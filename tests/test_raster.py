from __future__ import annotations

import numpy as np
import pytest
from PIL import Image, ImageDraw

from pdfsuite.core.exceptions import PasswordError, RenderError, ValidationError
from pdfsuite.core.raster import (
    PyMuPDFBackend,
    Surface,
    deskew,
    difference_ratio,
    enhance_contrast,
    estimate_skew,
    grayscale,
    render_all,
    stitch_vertical,
    surface_to_image_bytes,
)

from conftest import FakeRaster, build_pdf, image_bytes


def _lines_image(angle: float = 0.0) -> Surface:
    image = Image.new("L", (400, 400), 255)
    draw = ImageDraw.Draw(image)
    for top in range(40, 380, 40):
        draw.rectangle((0, top, 400, top + 4), fill=0)
    if angle:
        image = image.rotate(angle, resample=Image.BICUBIC, expand=False, fillcolor=255)
    return Surface(image.convert("RGB"))


def test_pymupdf_backend_renders_at_scale() -> None:
    backend = PyMuPDFBackend()
    data = build_pdf(2, size=(100, 50))

    assert backend.page_count(data) == 2
    surface = backend.render_page(data, 1, 2.0)
    assert (surface.width, surface.height) == (200, 100)


def test_pymupdf_backend_checks_password() -> None:
    backend = PyMuPDFBackend()
    data = build_pdf(1, password="opensesame")

    with pytest.raises(PasswordError):
        backend.render_page(data, 0, 1.0, "nope")
    assert backend.render_page(data, 0, 1.0, "opensesame").width == 200


def test_pymupdf_backend_rejects_bad_page() -> None:
    with pytest.raises(RenderError):
        PyMuPDFBackend().render_page(build_pdf(1), 3, 1.0)


def test_render_all_uses_backend() -> None:
    raster = FakeRaster()
    surfaces = render_all(build_pdf(3), 1.5, backend=raster)

    assert len(surfaces) == 3
    assert raster.calls == [(0, 1.5), (1, 1.5), (2, 1.5)]


def test_surface_from_bytes_rejects_garbage() -> None:
    with pytest.raises(RenderError):
        Surface.from_bytes(b"\x00\x01")


def test_surface_to_image_bytes_flattens_alpha_for_jpeg() -> None:
    surface = Surface.from_bytes(image_bytes(mode="RGBA", color=(10, 20, 30, 0)))
    assert surface.has_alpha

    data = surface_to_image_bytes(surface, "jpeg", quality=80)
    assert data[:2] == b"\xff\xd8"
    with pytest.raises(ValidationError):
        surface_to_image_bytes(surface, "gif")


@pytest.mark.parametrize("method", ["luminosity", "average", "desaturate"])
def test_grayscale_is_idempotent(method: str) -> None:
    surface = Surface.from_bytes(image_bytes((16, 16), color=(200, 30, 90)))
    once = grayscale(surface, method)
    twice = grayscale(once, method)

    pixels = once.pixels
    assert np.array_equal(pixels[..., 0], pixels[..., 1])
    assert np.array_equal(pixels[..., 1], pixels[..., 2])
    assert np.array_equal(once.pixels, twice.pixels)


def test_grayscale_rejects_unknown_method() -> None:
    with pytest.raises(ValidationError):
        grayscale(Surface.from_bytes(image_bytes()), "sepia")


def test_grayscale_keeps_alpha() -> None:
    surface = Surface.from_bytes(image_bytes(mode="RGBA", color=(10, 20, 30, 128)))
    result = grayscale(surface)
    assert result.has_alpha
    assert int(result.pixels[0, 0, 3]) == 128


def test_enhance_contrast_stretches_from_mid_grey() -> None:
    surface = Surface.from_bytes(image_bytes((4, 4), color=(100, 128, 200)))
    pixel = enhance_contrast(surface, 2.0).pixels[0, 0]
    assert tuple(int(value) for value in pixel) == (72, 128, 255)


def test_estimate_skew_is_zero_for_level_or_blank_pages() -> None:
    assert estimate_skew(_lines_image()) == 0.0
    assert estimate_skew(Surface(Image.new("RGB", (50, 50), "white"))) == 0.0


def test_deskew_levels_rotated_lines() -> None:
    corrected, angle = deskew(_lines_image(3.0))

    assert angle == pytest.approx(-3.0, abs=1.0)
    assert (corrected.width, corrected.height) == (400, 400)


def test_stitch_vertical() -> None:
    first = Surface(Image.new("RGB", (40, 10), "red"))
    second = Surface(Image.new("RGB", (20, 30), "blue"))
    stitched = stitch_vertical([first, second])

    assert (stitched.width, stitched.height) == (40, 40)
    assert stitched.image.getpixel((0, 20)) == (255, 255, 255)
    assert stitched.image.getpixel((20, 20)) == (0, 0, 255)
    with pytest.raises(ValidationError):
        stitch_vertical([])


def test_difference_ratio() -> None:
    white = Surface(Image.new("RGB", (10, 10), "white"))
    half = Image.new("RGB", (10, 10), "white")
    half.paste((0, 0, 0), (0, 0, 10, 5))

    assert difference_ratio(white, white) == 0.0
    assert difference_ratio(white, Surface(half)) == pytest.approx(0.5)
