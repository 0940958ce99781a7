"""One-off script for debugging generate and edit calls against the live API."""

from pathlib import Path

from config.settings import load_config
from modules.ui.callbacks import default_controller_factory
from modules.utils.logging import setup_logging


def main() -> None:
    # 1. Real configuration and controller
    config = load_config()
    setup_logging(config)
    controller = default_controller_factory(config)()

    # 2. Generate from the built-in logo preset
    controller.set_mode("generate")
    prompt = controller.load_preset(config.default_preset)
    controller.submit(prompt=prompt)
    print("Generate status:", controller.state.status.value, controller.state.message)
    if controller.state.current_image is None:
        print("No image returned, check the status message.")
        return

    # 3. Edit the generated image
    controller.submit(prompt="Make the background dark navy", mode="edit")
    print("Edit status:", controller.state.status.value, controller.state.message)

    path = controller.export()
    print("Image saved:", Path(path).resolve())
    print("History entries:", len(controller.state.history))


if __name__ == "__main__":
    main()
