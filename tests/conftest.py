"""Shared fixtures: synthetic images built with Pillow."""

from __future__ import annotations

import io

import pytest
from PIL import Image


def encode(
    img: Image.Image,
    fmt: str,
    orientation: int | None = None,
    extra_tags: dict[int, object] | None = None,
) -> bytes:
    buf = io.BytesIO()
    params = {}
    if orientation is not None or extra_tags:
        exif = Image.Exif()
        if orientation is not None:
            exif[0x0112] = orientation
        for tag, value in (extra_tags or {}).items():
            exif[tag] = value
        params["exif"] = exif.tobytes()
    if fmt == "JPEG":
        img = img.convert("RGB")
        params["quality"] = 95
    img.save(buf, fmt, **params)
    return buf.getvalue()


@pytest.fixture
def image_bytes():
    """Factory: encode an image to bytes, optionally with an EXIF orientation tag."""
    return encode


@pytest.fixture
def gradient():
    """Factory: an RGB image whose every pixel has a distinct color."""

    def make(width: int, height: int) -> Image.Image:
        img = Image.new("RGB", (width, height))
        for y in range(height):
            for x in range(width):
                img.putpixel((x, y), (x * 40 + 10, y * 40 + 10, 99))
        return img

    return make


@pytest.fixture
def watermark_file(tmp_path):
    """A 40x20 opaque red PNG watermark on disk."""
    path = tmp_path / "watermark.png"
    Image.new("RGBA", (40, 20), (255, 0, 0, 255)).save(path)
    return path
