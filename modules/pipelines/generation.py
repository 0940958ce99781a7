"""Generate and edit requests built on top of the Gemini adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, Sequence

from modules.pipelines.gemini_adapter import InlineImagePart, Part, TextPart
from modules.services.errors import ValidationError
from modules.utils.image_utils import EncodedImage, parse_data_uri

logger = logging.getLogger(__name__)

EDIT_INSTRUCTION = "Instruction: {prompt}. Apply this edit and return the image."


class Mode(str, Enum):
    """What a submission does with the prompt."""

    GENERATE = "generate"
    EDIT = "edit"


class ImageAdapter(Protocol):
    def request_image(self, parts: Sequence[Part]) -> Optional[EncodedImage]:
        ...


@dataclass(slots=True)
class GenerationRequest:
    """Request data for a generate or edit call."""

    mode: Mode
    prompt: str
    source_image: Optional[str] = None

    def validate(self) -> None:
        if not self.prompt or not self.prompt.strip():
            raise ValidationError("Please enter a prompt first.")
        if self.mode is Mode.EDIT and not self.source_image:
            raise ValidationError("Upload or generate an image before requesting an edit.")


class GenerationService:
    """Translate generation requests into adapter parts."""

    def __init__(self, adapter: ImageAdapter) -> None:
        self.adapter = adapter

    def build_parts(self, request: GenerationRequest) -> List[Part]:
        request.validate()
        prompt = request.prompt.strip()
        if request.mode is Mode.GENERATE:
            return [TextPart(prompt)]
        # validate() guarantees a source image in edit mode
        source = parse_data_uri(request.source_image or "")
        return [
            InlineImagePart(source),
            TextPart(EDIT_INSTRUCTION.format(prompt=prompt)),
        ]

    def generate(self, request: GenerationRequest) -> Optional[str]:
        """Run the request and return the resulting data URI, or None."""
        parts = self.build_parts(request)
        logger.info("Submitting %s request", request.mode.value)
        result = self.adapter.request_image(parts)
        if result is None:
            return None
        return result.to_data_uri()
