"""Data URI encoding and image decoding helpers."""

from __future__ import annotations

import base64
import binascii
import io
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from modules.services.errors import ImageDecodeError, InvalidImageFormat

DEFAULT_MIME_TYPE = "image/png"

_DATA_URI_RE = re.compile(r"data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<payload>[A-Za-z0-9+/=\s]+)")


@dataclass(frozen=True, slots=True)
class EncodedImage:
    """MIME-tagged image bytes, rendered as a data URI."""

    mime_type: str
    data: bytes

    @property
    def base64_payload(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64_payload}"


def parse_data_uri(uri: str) -> EncodedImage:
    """Strictly parse ``data:<mime>;base64,<payload>`` into an EncodedImage."""
    if not isinstance(uri, str):
        raise InvalidImageFormat("Invalid image format: expected a data URI string")
    match = _DATA_URI_RE.fullmatch(uri.strip())
    if match is None:
        raise InvalidImageFormat("Invalid image format: expected data:<mime>;base64,<payload>")
    payload = "".join(match.group("payload").split())
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidImageFormat(f"Invalid image format: {exc}") from exc
    if not data:
        raise InvalidImageFormat("Invalid image format: empty payload")
    return EncodedImage(mime_type=match.group("mime").lower(), data=data)


def encode_data_uri(data: bytes, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    """Wrap raw bytes into a data URI."""
    return EncodedImage(mime_type=mime_type, data=data).to_data_uri()


def load_image_file(path: Union[str, Path]) -> EncodedImage:
    """Read an image from disk, verifying that Pillow can decode it."""
    file_path = Path(path)
    try:
        raw = file_path.read_bytes()
    except OSError as exc:
        raise ImageDecodeError(f"Could not read {file_path.name}: {exc}") from exc

    try:
        with Image.open(io.BytesIO(raw)) as image:
            image.verify()
            image_format = image.format
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
        raise ImageDecodeError(f"{file_path.name} is not a supported image file") from exc

    mime_type = Image.MIME.get(image_format or "", DEFAULT_MIME_TYPE)
    return EncodedImage(mime_type=mime_type, data=raw)


def to_pil(image: Union[str, EncodedImage]) -> Image.Image:
    """Decode a data URI (or EncodedImage) into a loaded PIL image for display."""
    encoded = parse_data_uri(image) if isinstance(image, str) else image
    try:
        pil_image = Image.open(io.BytesIO(encoded.data))
        pil_image.load()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise ImageDecodeError("Image payload could not be decoded") from exc
    return pil_image


def to_png_bytes(image: EncodedImage) -> bytes:
    """Return PNG bytes, converting with Pillow when the source is another format."""
    if image.mime_type == "image/png":
        return image.data
    buffer = io.BytesIO()
    pil_image = to_pil(image)
    if pil_image.mode not in ("RGB", "RGBA", "L", "LA", "P"):
        pil_image = pil_image.convert("RGBA")
    pil_image.save(buffer, format="PNG")
    return buffer.getvalue()
