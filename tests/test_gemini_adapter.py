"""GeminiImageAdapter unit tests."""

from __future__ import annotations

import base64
import json
from typing import Any, Optional

import pytest
import requests

from config.settings import AppConfig
from modules.pipelines import gemini_adapter
from modules.services.errors import InvalidImageFormat, RemoteRequestFailed, ValidationError
from modules.utils.image_utils import EncodedImage


class DummyResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, body: Any = None, raw: Optional[bytes] = None) -> None:
        self.status_code = status_code
        if raw is not None:
            self.content = raw
        else:
            self.content = json.dumps(body).encode("utf-8") if body is not None else b""

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        return json.loads(self.content.decode("utf-8"))


class DummySession:
    """Capture outbound calls instead of hitting the network."""

    def __init__(self, response: Optional[DummyResponse] = None, exc: Optional[Exception] = None) -> None:
        self.response = response or DummyResponse(body={})
        self.exc = exc
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> DummyResponse:
        self.calls.append({"url": url, **kwargs})
        if self.exc is not None:
            raise self.exc
        return self.response


def build_adapter(session: DummySession, **overrides: Any) -> gemini_adapter.GeminiImageAdapter:
    config = AppConfig(gemini_api_key="secret-key", **overrides)
    return gemini_adapter.GeminiImageAdapter(config, session=session)  # type: ignore[arg-type]


def image_response(data: str, mime_type: Optional[str] = "image/png") -> dict[str, Any]:
    inline: dict[str, Any] = {"data": data}
    if mime_type is not None:
        inline["mimeType"] = mime_type
    return {
        "candidates": [
            {"content": {"parts": [{"text": "Here is your logo"}, {"inlineData": inline}]}}
        ]
    }


def test_request_payload_and_endpoint(png_bytes):
    session = DummySession(DummyResponse(body={"candidates": []}))
    adapter = build_adapter(session, request_timeout=12.0)
    image = EncodedImage(mime_type="image/png", data=png_bytes)

    adapter.request_image([gemini_adapter.InlineImagePart(image), gemini_adapter.TextPart("make it red")])

    call = session.calls[0]
    assert call["url"].endswith("/models/gemini-2.5-flash-image:generateContent")
    assert call["params"] == {"key": "secret-key"}
    assert call["timeout"] == 12.0
    body = call["json"]
    assert body["generationConfig"] == {"responseModalities": ["TEXT", "IMAGE"]}
    parts = body["contents"][0]["parts"]
    assert parts[0] == {
        "inline_data": {
            "mime_type": "image/png",
            "data": base64.b64encode(png_bytes).decode("ascii"),
        }
    }
    assert parts[1] == {"text": "make it red"}


def test_returns_first_inline_image():
    first = base64.b64encode(b"first-image").decode("ascii")
    response = image_response(first, "image/jpeg")
    response["candidates"][0]["content"]["parts"].append(
        {"inlineData": {"mimeType": "image/png", "data": base64.b64encode(b"second").decode("ascii")}}
    )
    adapter = build_adapter(DummySession(DummyResponse(body=response)))

    result = adapter.request_image([gemini_adapter.TextPart("logo")])

    assert result == EncodedImage(mime_type="image/jpeg", data=b"first-image")


def test_missing_mime_type_defaults_to_png():
    payload = base64.b64encode(b"pixels").decode("ascii")
    adapter = build_adapter(DummySession(DummyResponse(body=image_response(payload, None))))

    result = adapter.request_image([gemini_adapter.TextPart("logo")])

    assert result is not None
    assert result.mime_type == "image/png"


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"candidates": []},
        {"candidates": [{"content": {"parts": [{"text": "I cannot draw that"}]}}]},
        {"candidates": [{"finishReason": "SAFETY"}]},
    ],
)
def test_returns_none_without_image(body):
    adapter = build_adapter(DummySession(DummyResponse(body=body)))
    assert adapter.request_image([gemini_adapter.TextPart("logo")]) is None


def test_provider_error_message_is_propagated():
    body = {"error": {"code": 400, "message": "API key not valid"}}
    adapter = build_adapter(DummySession(DummyResponse(status_code=400, body=body)))

    with pytest.raises(RemoteRequestFailed) as excinfo:
        adapter.request_image([gemini_adapter.TextPart("logo")])

    assert str(excinfo.value) == "API key not valid"
    assert excinfo.value.status_code == 400


def test_generic_message_without_provider_details():
    adapter = build_adapter(DummySession(DummyResponse(status_code=503, raw=b"<html>oops</html>")))

    with pytest.raises(RemoteRequestFailed) as excinfo:
        adapter.request_image([gemini_adapter.TextPart("logo")])

    assert "503" in str(excinfo.value)


def test_timeout_becomes_remote_failure():
    adapter = build_adapter(DummySession(exc=requests.Timeout("slow")), request_timeout=5.0)

    with pytest.raises(RemoteRequestFailed) as excinfo:
        adapter.request_image([gemini_adapter.TextPart("logo")])

    assert "timed out" in str(excinfo.value)


def test_connection_error_becomes_remote_failure():
    adapter = build_adapter(DummySession(exc=requests.ConnectionError("refused")))

    with pytest.raises(RemoteRequestFailed):
        adapter.request_image([gemini_adapter.TextPart("logo")])


def test_empty_parts_rejected_before_network():
    session = DummySession()
    adapter = build_adapter(session)

    with pytest.raises(ValidationError):
        adapter.request_image([])

    assert session.calls == []


def test_inline_part_from_malformed_uri_fails_before_network():
    with pytest.raises(InvalidImageFormat):
        gemini_adapter.InlineImagePart.from_data_uri("data:image/png;base64")


@pytest.mark.parametrize(
    "body",
    [
        {"candidates": ["not-a-candidate"]},
        {"candidates": [{"content": "flat text"}]},
        {"candidates": [{"content": {"parts": "not-a-list"}}]},
        {"candidates": [{"content": {"parts": ["loose", None]}}]},
        {"candidates": [{"content": {"parts": [{"inlineData": "oops"}]}}]},
    ],
)
def test_oddly_shaped_response_yields_no_image(body):
    adapter = build_adapter(DummySession(DummyResponse(body=body)))
    assert adapter.request_image([gemini_adapter.TextPart("logo")]) is None


def test_malformed_image_payload_becomes_remote_failure():
    adapter = build_adapter(DummySession(DummyResponse(body=image_response("not base64!!"))))

    with pytest.raises(RemoteRequestFailed) as excinfo:
        adapter.request_image([gemini_adapter.TextPart("logo")])

    assert "malformed" in str(excinfo.value)
    assert not isinstance(excinfo.value, InvalidImageFormat)
