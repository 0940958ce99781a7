"""File storage helpers."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

from modules.utils.image_utils import parse_data_uri, to_png_bytes

logger = logging.getLogger(__name__)


class StorageService:
    """Write exported images to the export directory."""

    def __init__(self, output_dir: Path, prefix: str = "forge") -> None:
        self.output_dir = Path(output_dir)
        self.prefix = prefix

    def build_filename(self, mode: str, timestamp_ms: Optional[int] = None) -> str:
        stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
        return f"{self.prefix}-{mode}-{stamp}.png"

    def save_image(self, data_uri: str, mode: str) -> Path:
        """Persist the image as PNG and return the file path."""
        image = parse_data_uri(data_uri)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / self.build_filename(mode)
        path.write_bytes(to_png_bytes(image))
        logger.info("Exported image to %s", path)
        return path
