"""Client wrapper around the Gemini ``generateContent`` image endpoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Union

import requests

from config.settings import AppConfig
from modules.services.errors import InvalidImageFormat, RemoteRequestFailed, ValidationError
from modules.utils.image_utils import DEFAULT_MIME_TYPE, EncodedImage, parse_data_uri

logger = logging.getLogger(__name__)

RESPONSE_MODALITIES = ["TEXT", "IMAGE"]


@dataclass(frozen=True, slots=True)
class TextPart:
    """Plain text segment of a request."""

    text: str

    def to_wire(self) -> Dict[str, Any]:
        return {"text": self.text}


@dataclass(frozen=True, slots=True)
class InlineImagePart:
    """Inline image segment of a request."""

    image: EncodedImage

    @classmethod
    def from_data_uri(cls, uri: str) -> "InlineImagePart":
        return cls(image=parse_data_uri(uri))

    def to_wire(self) -> Dict[str, Any]:
        return {
            "inline_data": {
                "mime_type": self.image.mime_type,
                "data": self.image.base64_payload,
            }
        }


Part = Union[TextPart, InlineImagePart]


def build_payload(parts: Sequence[Part]) -> Dict[str, Any]:
    """Serialize request parts into the generateContent JSON body."""
    if not parts:
        raise ValidationError("At least one request part is required")
    return {
        "contents": [{"parts": [part.to_wire() for part in parts]}],
        "generationConfig": {"responseModalities": list(RESPONSE_MODALITIES)},
    }


def extract_image(data: Dict[str, Any]) -> Optional[EncodedImage]:
    """Return the first inline image of the first candidate, if any.

    Malformed image payloads from the provider raise RemoteRequestFailed.
    """
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return None
    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return None
    for part in parts:
        if not isinstance(part, dict):
            continue
        inline = part.get("inlineData") or part.get("inline_data")
        if not isinstance(inline, dict) or not inline.get("data"):
            continue
        mime_type = inline.get("mimeType") or inline.get("mime_type") or DEFAULT_MIME_TYPE
        try:
            return parse_data_uri(f"data:{mime_type};base64,{inline['data']}")
        except InvalidImageFormat as exc:
            raise RemoteRequestFailed("Image service returned a malformed image payload") from exc
    return None


class GeminiImageAdapter:
    """Send text/image parts to Gemini and decode the returned image."""

    def __init__(self, config: AppConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self._session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.config.api_base}/models/{self.config.gemini_model}:generateContent"

    def request_image(self, parts: Sequence[Part]) -> Optional[EncodedImage]:
        """Issue one generateContent call.

        Returns None when the response is well formed but carries no image.
        Raises RemoteRequestFailed for transport and API errors.
        """
        payload = build_payload(parts)
        logger.info(
            "Requesting image from %s (%d part(s))", self.config.gemini_model, len(parts)
        )

        try:
            response = self._session.post(
                self.endpoint,
                params={"key": self.config.gemini_api_key or ""},
                json=payload,
                timeout=self.config.request_timeout,
            )
        except requests.Timeout as exc:
            logger.error("Image request timed out after %ss", self.config.request_timeout)
            raise RemoteRequestFailed(
                f"Image request timed out after {self.config.request_timeout:g}s"
            ) from exc
        except requests.RequestException as exc:
            logger.error("Image request could not be sent: %s", exc.__class__.__name__)
            raise RemoteRequestFailed("Could not reach the image service") from exc

        data = self._decode_body(response)
        error = data.get("error") if isinstance(data, dict) else None
        if not response.ok or error:
            message = _error_message(error) or f"Image request failed with status {response.status_code}"
            logger.error("Image request failed (%s): %s", response.status_code, message)
            raise RemoteRequestFailed(message, status_code=response.status_code)

        if not isinstance(data, dict):
            raise RemoteRequestFailed("Unexpected response from the image service")

        image = extract_image(data)
        if image is None:
            logger.warning("Image service returned no image part")
        else:
            logger.info("Received %s image (%d bytes)", image.mime_type, len(image.data))
        return image

    @staticmethod
    def _decode_body(response: requests.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            if not response.ok:
                return {}
            raise RemoteRequestFailed(
                "Image service returned an unreadable response", status_code=response.status_code
            ) from exc


def _error_message(error: Any) -> Optional[str]:
    if isinstance(error, dict):
        message = error.get("message")
        return str(message) if message else None
    if isinstance(error, str) and error:
        return error
    return None
