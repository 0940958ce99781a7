"""Error types shared by the adapter, the session controller and the UI."""

from __future__ import annotations

from typing import Optional


class ForgeError(RuntimeError):
    """Base class for recoverable, user-facing failures."""


class ValidationError(ForgeError):
    """Input rejected locally; no network call was attempted."""


class InvalidImageFormat(ValidationError, ValueError):
    """A data URI is missing its MIME prefix or carries a malformed payload."""


class ImageDecodeError(ForgeError):
    """An uploaded file could not be decoded as an image."""


class RemoteRequestFailed(ForgeError):
    """The image API answered with an error or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
