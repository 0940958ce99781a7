"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from PIL import Image

from config.settings import AppConfig
from modules.optimization.prompt_presets import PromptPresetRegistry
from modules.pipelines.gemini_adapter import GeminiImageAdapter
from modules.pipelines.generation import GenerationService, Mode
from modules.services.errors import ForgeError
from modules.services.session import SessionController, SessionState, Status
from modules.services.storage_service import StorageService
from modules.utils.image_utils import to_pil

logger = logging.getLogger(__name__)

ControllerFactory = Callable[[], SessionController]


def default_controller_factory(
    config: AppConfig, presets: Optional[PromptPresetRegistry] = None
) -> ControllerFactory:
    """Return a factory building one controller per browser session."""
    registry = presets or PromptPresetRegistry()

    def _factory() -> SessionController:
        adapter = GeminiImageAdapter(config)
        return SessionController(
            generation=GenerationService(adapter),
            storage=StorageService(config.export_dir, prefix=config.export_prefix),
            presets=registry,
        )

    return _factory


def _preview(data_uri: Optional[str]) -> Optional[Image.Image]:
    if not data_uri:
        return None
    try:
        return to_pil(data_uri)
    except ForgeError:
        logger.warning("Could not decode image for preview")
        return Image.new("RGBA", (1, 1))


def status_text(state: SessionState) -> str:
    if state.status is Status.ERROR:
        return f"**Process aborted:** {state.message}"
    if state.status is Status.PROCESSING:
        return "Forging..."
    if state.status is Status.UPLOADING:
        return "Uploading..."
    if state.current_image is None:
        if state.mode is Mode.EDIT:
            return "Upload a base image to begin."
        return "Describe your vision in the prompt box."
    return "Ready."


def gallery_items(state: SessionState) -> list[tuple[Any, str]]:
    items: list[tuple[Any, str]] = []
    for entry in state.history:
        stamp = time.strftime("%H:%M", time.localtime(entry.timestamp))
        items.append((_preview(entry.edited_url), f"{stamp} · {entry.prompt}"))
    return items


def build_callbacks(
    config: AppConfig,
    controller_factory: Optional[ControllerFactory] = None,
    presets: Optional[PromptPresetRegistry] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions.

    Every callback takes the per-session controller (``None`` on first use)
    as its first argument and returns it first so Gradio keeps it in state.
    """
    factory = controller_factory or default_controller_factory(config, presets)

    def _ensure(
        session: Optional[SessionController], prompt: Optional[str] = None
    ) -> SessionController:
        controller = session if session is not None else factory()
        # The textbox is the source of truth for unsubmitted prompt text.
        if prompt is not None:
            controller.set_prompt(prompt)
        return controller

    def render(session: SessionController) -> tuple[Any, ...]:
        state = session.state
        return (
            session,
            _preview(state.current_image),
            state.prompt,
            state.mode.value,
            status_text(state),
            gallery_items(state),
        )

    def on_upload(
        session: Optional[SessionController],
        file_path: Optional[str],
        prompt: Optional[str] = None,
    ) -> tuple[Any, ...]:
        controller = _ensure(session, prompt)
        controller.upload(file_path)
        return render(controller)

    def on_submit(
        session: Optional[SessionController], prompt: str, mode: str
    ) -> tuple[Any, ...]:
        controller = _ensure(session)
        controller.submit(prompt=prompt or "", mode=mode or None)
        return render(controller)

    def on_change_mode(
        session: Optional[SessionController], mode: str, prompt: Optional[str] = None
    ) -> tuple[Any, ...]:
        controller = _ensure(session, prompt)
        if mode:
            controller.set_mode(mode)
        return render(controller)

    def on_load_preset(
        session: Optional[SessionController], preset_name: str
    ) -> tuple[SessionController, str]:
        controller = _ensure(session)
        try:
            prompt = controller.load_preset(preset_name or config.default_preset)
        except KeyError as exc:
            logger.warning("%s", exc)
            prompt = controller.state.prompt
        return controller, prompt

    def on_revert(
        session: Optional[SessionController], prompt: Optional[str] = None
    ) -> tuple[Any, ...]:
        controller = _ensure(session, prompt)
        controller.revert()
        return render(controller)

    def on_select_history(
        session: Optional[SessionController],
        index: Optional[int],
        prompt: Optional[str] = None,
    ) -> tuple[Any, ...]:
        controller = _ensure(session, prompt)
        history = controller.state.history
        if index is not None and 0 <= index < len(history):
            controller.select_history_entry(history[index])
        return render(controller)

    def on_export(session: Optional[SessionController]) -> tuple[Any, ...]:
        controller = _ensure(session)
        try:
            path = controller.export()
        except (ForgeError, OSError) as exc:
            return controller, None, f"Export failed: {exc}"
        return controller, str(path), f"Exported {path.name}"

    return {
        "render": render,
        "on_upload": on_upload,
        "on_submit": on_submit,
        "on_change_mode": on_change_mode,
        "on_load_preset": on_load_preset,
        "on_revert": on_revert,
        "on_select_history": on_select_history,
        "on_export": on_export,
    }
