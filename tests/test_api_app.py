from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from text_essence.adapters.chat_transport import HttpxChatTransport, TransportConfig
from text_essence.adapters.relay_settings import RelaySettings
from text_essence.api.app import create_app
from text_essence.api.contracts import MAX_TEXT_LENGTH, TEXT_TOO_LONG_MESSAGE
from text_essence.domain.models import DEFAULT_MODEL
from text_essence.domain.ports import TransportResponse

STARSHIP_CONTENT = (
    "```json\n"
    '{"summary":"A rocket test flight occurred.","keyPoints":["Test flight"],'
    '"tone":"neutral","readingTime":"~1 min","keywords":["SpaceX"]}\n'
    "```"
)


class FakeTransport:
    def __init__(self, response: TransportResponse) -> None:
        self.response = response
        self.calls: list[dict[str, Any]] = []

    @property
    def supports_json_mode(self) -> bool:
        return False

    async def send(self, payload: dict[str, Any]) -> TransportResponse:
        self.calls.append(payload)
        return self.response


def _ok(content: str = STARSHIP_CONTENT) -> TransportResponse:
    return TransportResponse(
        status_code=200,
        body=json.dumps({"choices": [{"message": {"content": content}}]}),
    )


def _client(transport: FakeTransport | None = None) -> TestClient:
    return TestClient(create_app(settings=RelaySettings(), transport=transport))


def test_healthz_and_root() -> None:
    client = _client(FakeTransport(_ok()))
    assert client.get("/healthz").json() == {"status": "ok", "service": "text_essence"}
    root = client.get("/api").json()
    assert root["upstream_configured"] is True
    assert "/api/analyze" in root["endpoints"]


def test_analyze_returns_normalized_result() -> None:
    transport = FakeTransport(_ok())
    client = _client(transport)
    response = client.post(
        "/api/analyze",
        json={"text": "SpaceX launched Starship on a test flight."},
    )
    assert response.status_code == 200
    assert response.json() == {
        "summary": "A rocket test flight occurred.",
        "keyPoints": ["Test flight"],
        "tone": "neutral",
        "readingTime": "~1 min",
        "keywords": ["SpaceX"],
    }
    sent = transport.calls[0]
    assert sent["model"] == DEFAULT_MODEL
    assert sent["temperature"] == 0.7


def test_analyze_applies_partial_config_overrides() -> None:
    transport = FakeTransport(_ok())
    client = _client(transport)
    response = client.post(
        "/api/analyze",
        json={
            "text": "hello",
            "config": {"model": "vendor/other", "temperature": 1.3, "systemInstruction": "Terse."},
        },
    )
    assert response.status_code == 200
    sent = transport.calls[0]
    assert sent["model"] == "vendor/other"
    assert sent["temperature"] == 1.3
    assert sent["messages"][0]["content"].startswith("Terse.")


def test_empty_text_is_400_without_upstream_call() -> None:
    transport = FakeTransport(_ok())
    client = _client(transport)
    for body in ({"text": "   "}, {"text": ""}, {}):
        response = client.post("/api/analyze", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Text is required"}
    assert transport.calls == []


def test_unknown_model_is_400() -> None:
    client = _client(FakeTransport(TransportResponse(status_code=404, body="{}")))
    response = client.post("/api/analyze", json={"text": "hello", "config": {"model": "nope"}})
    assert response.status_code == 400
    assert response.json() == {"error": "Model not found. Check model name."}


def test_upstream_failures_are_500_with_one_line_errors() -> None:
    cases = [
        (TransportResponse(status_code=401, body=""), "API authentication error"),
        (TransportResponse(status_code=503, body=""), "AI service error"),
        (
            TransportResponse(status_code=200, body=json.dumps({"choices": []})),
            "Empty response from AI",
        ),
        (_ok("not json at all"), "Invalid JSON response from AI"),
    ]
    for upstream, message in cases:
        response = _client(FakeTransport(upstream)).post("/api/analyze", json={"text": "hello"})
        assert response.status_code == 500
        assert response.json() == {"error": message}


def test_malformed_schema_is_400() -> None:
    transport = FakeTransport(_ok())
    response = _client(transport).post(
        "/api/analyze",
        json={"text": "hello", "config": {"responseSchema": "{oops"}},
    )
    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid response schema JSON")
    assert transport.calls == []


def test_out_of_range_temperature_is_400() -> None:
    response = _client(FakeTransport(_ok())).post(
        "/api/analyze",
        json={"text": "hello", "config": {"temperature": 5}},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}


def test_missing_secret_is_500() -> None:
    client = _client(None)
    response = client.post("/api/analyze", json={"text": "hello"})
    assert response.status_code == 500
    assert response.json() == {"error": "Server configuration error"}
    blank = client.post("/api/analyze", json={"text": "   "})
    assert blank.status_code == 500
    assert blank.json() == {"error": "Server configuration error"}
    assert client.get("/api").json()["upstream_configured"] is False


def test_method_handling_and_cors() -> None:
    client = _client(FakeTransport(_ok()))
    assert client.options("/api/analyze").status_code == 200

    not_allowed = client.get("/api/analyze")
    assert not_allowed.status_code == 405
    assert not_allowed.json() == {"error": "Method not allowed"}

    preflight = client.options(
        "/api/analyze",
        headers={
            "Origin": "https://anywhere.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert preflight.status_code == 200
    assert preflight.headers["access-control-allow-origin"] == "*"

    posted = client.post(
        "/api/analyze",
        json={"text": "hello"},
        headers={"Origin": "https://anywhere.example"},
    )
    assert posted.headers["access-control-allow-origin"] == "*"


def test_app_builds_httpx_transport_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: list[TransportConfig] = []
    original_init = HttpxChatTransport.__init__

    def recording_init(self: HttpxChatTransport, config: TransportConfig, **kwargs: Any) -> None:
        captured.append(config)
        original_init(
            self,
            config,
            api_key=kwargs["api_key"],
            http_transport=httpx.MockTransport(
                lambda request: httpx.Response(
                    200, json={"choices": [{"message": {"content": STARSHIP_CONTENT}}]}
                )
            ),
        )

    monkeypatch.setattr(HttpxChatTransport, "__init__", recording_init)
    client = TestClient(create_app(settings=RelaySettings(api_key="k", provider="openai")))
    response = client.post("/api/analyze", json={"text": "hello"})
    assert response.status_code == 200
    assert captured[0].supports_json_mode is True
    assert client.get("/api").json()["json_mode"] is True


def test_blank_model_uses_the_default_model() -> None:
    transport = FakeTransport(_ok())
    response = _client(transport).post(
        "/api/analyze",
        json={"text": "hi", "config": {"model": ""}},
    )
    assert response.status_code == 200
    assert transport.calls[0]["model"] == DEFAULT_MODEL


def test_text_validation_messages_distinguish_missing_from_too_long() -> None:
    transport = FakeTransport(_ok())
    client = _client(transport)

    too_long = client.post("/api/analyze", json={"text": "a" * (MAX_TEXT_LENGTH + 1)})
    assert too_long.status_code == 400
    assert too_long.json() == {"error": TEXT_TOO_LONG_MESSAGE}

    not_a_string = client.post("/api/analyze", json={"text": ["hello"]})
    assert not_a_string.status_code == 400
    assert not_a_string.json() == {"error": "Text is required"}
    assert transport.calls == []
