"""Prompt preset management."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

FORGE_LOGO_PROMPT = (
    "Minimalist vector logo for 'ForgeStudios', letter F formed by three connected "
    "network nodes with geometric lines, digital spark element at top right, deep "
    "charcoal and electric blue color scheme, solid white background, flat design, "
    "clean tech aesthetic, no shading --no realistic texture detail"
)


@dataclass(slots=True)
class PromptPreset:
    """Canned prompt offered by the generator."""

    name: str
    prompt: str
    label: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.label or self.name


class PromptPresetRegistry:
    """In-memory registry of prompt presets."""

    def __init__(self, include_builtin: bool = True) -> None:
        self._presets: Dict[str, PromptPreset] = {}
        if include_builtin:
            self.add(PromptPreset(name="forge-logo", prompt=FORGE_LOGO_PROMPT, label="Logo Preset"))

    def load_from_file(self, path: Path) -> None:
        """Load presets from a JSON list of {name, prompt, label?} objects."""
        if not path.exists():
            return
        with path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
        for entry in data:
            self.add(
                PromptPreset(
                    name=entry["name"],
                    prompt=entry["prompt"],
                    label=entry.get("label"),
                )
            )

    def add(self, preset: PromptPreset) -> None:
        """Register a new preset, replacing any preset with the same name."""
        self._presets[preset.name] = preset

    def list_presets(self) -> List[PromptPreset]:
        """Return all registered presets."""
        return list(self._presets.values())

    def get(self, name: str) -> PromptPreset:
        """Retrieve a preset by name."""
        try:
            return self._presets[name]
        except KeyError as exc:
            raise KeyError(f"Prompt preset '{name}' not found") from exc
