"""Gradio layout composition for the generator/editor studio."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

try:
    import gradio as gr
except ImportError:  # pragma: no cover
    gr = None  # type: ignore

from config.settings import AppConfig
from modules.optimization.prompt_presets import PromptPresetRegistry
from modules.pipelines.generation import Mode
from modules.ui.callbacks import build_callbacks

MODE_CHOICES = [("Editor", Mode.EDIT.value), ("Generator", Mode.GENERATE.value)]

LAB_NOTES = """
- Use **Generator** mode for pure creation.
- **Editor** mode preserves structure.
- Mention "flat design" or "minimalist" for vector-like results.
"""


def _load_preset_registry(config: AppConfig) -> PromptPresetRegistry:
    registry = PromptPresetRegistry()
    registry.load_from_file(Path(config.assets_dir) / "presets.json")
    return registry


def _preset_choices(registry: PromptPresetRegistry) -> Sequence[tuple[str, str]]:
    return [(preset.display_name, preset.name) for preset in registry.list_presets()]


def build_app(config: AppConfig) -> Any:
    """Compose and return the Gradio application."""
    if gr is None:
        raise RuntimeError("Gradio is not installed; install the project dependencies first.")

    presets = _load_preset_registry(config)
    callbacks_map = build_callbacks(config, presets=presets)
    preset_choices = _preset_choices(presets)
    default_preset = (
        config.default_preset
        if any(value == config.default_preset for _, value in preset_choices)
        else (preset_choices[0][1] if preset_choices else None)
    )

    with gr.Blocks(title="ForgeStudios") as demo:
        session = gr.State(None)
        gr.Markdown("## FORGE STUDIOS")

        with gr.Row():
            with gr.Column(scale=8):
                mode = gr.Radio(
                    label="Mode",
                    choices=MODE_CHOICES,
                    value=Mode.EDIT.value,
                )
                source = gr.File(
                    label="Source image",
                    file_types=["image"],
                    type="filepath",
                )
                current_image = gr.Image(
                    label="Current image",
                    type="pil",
                    interactive=False,
                    height=480,
                )
                prompt = gr.Textbox(
                    label="Prompt",
                    lines=4,
                    placeholder="e.g. 'Minimalist neon tiger head, vector art, black background'",
                )
                with gr.Row():
                    preset_select = gr.Dropdown(
                        label="Prompt preset",
                        choices=preset_choices,
                        value=default_preset,
                    )
                    preset_btn = gr.Button("Load Preset")
                submit_btn = gr.Button("Forge", variant="primary")
                with gr.Row():
                    revert_btn = gr.Button("Revert")
                    export_btn = gr.Button("Export")
                status = gr.Markdown("Upload a base image to begin.")
                export_file = gr.File(label="Download", interactive=False)

            with gr.Column(scale=4):
                history = gr.Gallery(
                    label="Forge History",
                    columns=1,
                    allow_preview=False,
                    height=600,
                )
                gr.Markdown(LAB_NOTES)

        render_outputs = [session, current_image, prompt, mode, status, history]

        source.upload(
            fn=callbacks_map["on_upload"],
            inputs=[session, source, prompt],
            outputs=render_outputs,
            concurrency_limit=None,
        )
        submit_btn.click(
            fn=callbacks_map["on_submit"],
            inputs=[session, prompt, mode],
            outputs=render_outputs,
            concurrency_limit=None,
        )
        mode.change(
            fn=callbacks_map["on_change_mode"],
            inputs=[session, mode, prompt],
            outputs=render_outputs,
        )
        preset_btn.click(
            fn=callbacks_map["on_load_preset"],
            inputs=[session, preset_select],
            outputs=[session, prompt],
        )
        revert_btn.click(
            fn=callbacks_map["on_revert"],
            inputs=[session, prompt],
            outputs=render_outputs,
        )

        def _on_select(current: Any, typed_prompt: str, evt: gr.SelectData) -> tuple[Any, ...]:
            return callbacks_map["on_select_history"](current, evt.index, typed_prompt)

        history.select(
            fn=_on_select,
            inputs=[session, prompt],
            outputs=render_outputs,
        )
        export_btn.click(
            fn=callbacks_map["on_export"],
            inputs=[session],
            outputs=[session, export_file, status],
        )

    return demo
