"""Shared fixtures."""

from __future__ import annotations

import io

import pytest
from PIL import Image

from modules.utils.image_utils import encode_data_uri


def make_png(color: str = "blue", size: tuple[int, int] = (4, 4)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def png_data_uri(png_bytes: bytes) -> str:
    return encode_data_uri(png_bytes, "image/png")
