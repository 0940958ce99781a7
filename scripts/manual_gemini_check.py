"""Manual script to verify the Gemini API key works."""

from __future__ import annotations

import requests
from config.settings import load_config

config = load_config()  # reads .env into os.environ

try:
    resp = requests.get(
        f"{config.api_base}/models/{config.gemini_model}",
        params={"key": config.gemini_api_key},
        timeout=30,
    )
    print("Status:", resp.status_code)
    if resp.ok:
        data = resp.json()
        print("Model:", data.get("name"))
        print("Methods:", ", ".join(data.get("supportedGenerationMethods", [])))
    else:
        print(resp.text[:500])
except Exception as exc:  # noqa: BLE001
    print("[error]", exc)
    raise
