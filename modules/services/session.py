"""Per-session state machine behind the Forge Studio UI.

A ``SessionController`` owns exactly one ``SessionState`` and is the only
thing that mutates it. Status moves between idle, uploading, processing and
error; every user action is refused while the session is busy (uploading or
processing), so at most one adapter call is in flight per session.

Failures never escape as exceptions from ``upload`` or ``submit``: they set
``status`` to error and store a human-readable ``message`` so the UI can
show it and the user can simply try again.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from modules.optimization.prompt_presets import PromptPresetRegistry
from modules.pipelines.generation import GenerationRequest, GenerationService, Mode
from modules.services.errors import ForgeError, ValidationError
from modules.services.history_service import GenerationHistory, HistoryEntry
from modules.services.storage_service import StorageService
from modules.utils.image_utils import load_image_file

logger = logging.getLogger(__name__)

NO_IMAGE_MESSAGE = "No image returned. Try rephrasing the prompt."


class Status(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    ERROR = "error"


@dataclass(slots=True)
class SessionState:
    """Everything the UI shows for one browser session."""

    mode: Mode = Mode.EDIT
    original_image: Optional[str] = None
    current_image: Optional[str] = None
    prompt: str = ""
    status: Status = Status.IDLE
    message: str = ""
    history: GenerationHistory = field(default_factory=GenerationHistory)

    @property
    def busy(self) -> bool:
        return self.status in (Status.UPLOADING, Status.PROCESSING)

    @property
    def can_revert(self) -> bool:
        return (
            not self.busy
            and self.original_image is not None
            and self.original_image != self.current_image
        )

    @property
    def can_export(self) -> bool:
        return not self.busy and self.current_image is not None


class SessionController:
    """Drive SessionState through upload, submit, revert, history and export."""

    def __init__(
        self,
        generation: GenerationService,
        storage: StorageService,
        presets: Optional[PromptPresetRegistry] = None,
        state: Optional[SessionState] = None,
    ) -> None:
        self.generation = generation
        self.storage = storage
        self.presets = presets or PromptPresetRegistry()
        self.state = state or SessionState()
        self._lock = threading.Lock()

    # Setters ------------------------------------------------------------------
    def set_mode(self, mode: Union[Mode, str]) -> None:
        if self.state.busy:
            return
        self.state.mode = Mode(mode)

    def set_prompt(self, prompt: str) -> None:
        if self.state.busy:
            return
        self.state.prompt = prompt or ""

    def load_preset(self, name: str) -> str:
        """Fill the prompt box with a registered preset and return its text."""
        preset = self.presets.get(name)
        self.set_prompt(preset.prompt)
        return self.state.prompt

    # Transitions --------------------------------------------------------------
    def upload(self, path: Union[str, Path, None]) -> bool:
        """Load a local image as both the original and current image."""
        if path is None or not self._claim(Status.UPLOADING, "upload"):
            return False

        try:
            encoded = load_image_file(path)
        except ForgeError as exc:
            self._fail(str(exc))
            return False
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected failure while loading %s", path)
            self._fail("The image could not be loaded.")
            return False

        data_uri = encoded.to_data_uri()
        self.state.original_image = data_uri
        self.state.current_image = data_uri
        self.state.mode = Mode.EDIT
        self._settle()
        logger.info("Loaded %s as %s", Path(path).name, encoded.mime_type)
        return True

    def submit(self, prompt: Optional[str] = None, mode: Union[Mode, str, None] = None) -> bool:
        """Generate or edit an image; returns True when a result was recorded."""
        if self._refuse_when_busy("submit"):
            return False
        if prompt is not None:
            self.state.prompt = prompt
        if mode is not None:
            self.state.mode = Mode(mode)

        state = self.state
        request = GenerationRequest(
            mode=state.mode,
            prompt=state.prompt,
            source_image=state.current_image if state.mode is Mode.EDIT else None,
        )
        try:
            request.validate()
        except ValidationError as exc:
            self._fail(str(exc))
            return False

        if not self._claim(Status.PROCESSING, "submit"):
            return False
        previous_image = state.current_image
        try:
            result = self.generation.generate(request)
        except ForgeError as exc:
            self._fail(str(exc))
            return False
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected failure during %s request", request.mode.value)
            self._fail("Something went wrong while talking to the image service.")
            return False

        if result is None:
            self._fail(NO_IMAGE_MESSAGE)
            return False

        original_url = previous_image if request.mode is Mode.EDIT and previous_image else result
        state.history.record(original_url=original_url, edited_url=result, prompt=request.prompt)
        state.current_image = result
        if request.mode is Mode.GENERATE or state.original_image is None:
            state.original_image = result
        state.prompt = ""
        self._settle()
        return True

    def revert(self) -> bool:
        if not self.state.can_revert:
            return False
        self.state.current_image = self.state.original_image
        return True

    def select_history_entry(self, entry: HistoryEntry) -> bool:
        if self._refuse_when_busy("select history entry"):
            return False
        self.state.current_image = entry.edited_url
        return True

    def export(self) -> Path:
        """Write the current image to disk without touching session state."""
        if self.state.busy:
            raise ValidationError("Wait for the current request to finish before exporting.")
        if self.state.current_image is None:
            raise ValidationError("There is no image to export yet.")
        return self.storage.save_image(self.state.current_image, self.state.mode.value)

    # Internal helpers ---------------------------------------------------------
    def _refuse_when_busy(self, action: str) -> bool:
        if self.state.busy:
            logger.warning("Ignoring %s while session is %s", action, self.state.status.value)
            return True
        return False

    def _claim(self, status: Status, action: str) -> bool:
        """Atomically move an idle or errored session into a busy status."""
        with self._lock:
            if self._refuse_when_busy(action):
                return False
            self.state.status = status
            return True

    def _settle(self) -> None:
        self.state.status = Status.IDLE
        self.state.message = ""

    def _fail(self, message: str) -> None:
        logger.warning("Session error: %s", message)
        self.state.status = Status.ERROR
        self.state.message = message
