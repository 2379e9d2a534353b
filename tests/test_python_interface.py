from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from text_essence.adapters.sqlite_config_store import InMemoryConfigPersistence
from text_essence.api.contracts import MAX_MODEL_LENGTH, MAX_TEXT_LENGTH, TEXT_TOO_LONG_MESSAGE
from text_essence.api.python_interface import (
    CONNECTION_ERROR_MESSAGE,
    GENERIC_ERROR_MESSAGE,
    INVALID_SETTINGS_MESSAGE,
    AnalyzerApiClient,
)
from text_essence.core.analysis_errors import (
    ConfigError,
    InputError,
    MalformedResponseError,
    ServiceError,
)
from text_essence.core.config_store import ConfigStore
from text_essence.core.presentation import AnalysisSession
from text_essence.domain.models import AnalysisResult, AppConfig

RESULT_JSON = {
    "summary": "A rocket test flight occurred.",
    "keyPoints": ["Test flight"],
    "tone": "neutral",
    "readingTime": "~1 min",
    "keywords": ["SpaceX"],
}


def _client(handler: httpx.MockTransport) -> AnalyzerApiClient:
    return AnalyzerApiClient(api_base_url="http://relay.test/", transport=handler)


def test_client_posts_text_and_camel_case_config() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=RESULT_JSON)

    client = _client(httpx.MockTransport(handler))
    config = AppConfig(model="vendor/m", temperature=1.1)
    result = asyncio.run(client.analyze("SpaceX launched Starship.", config))

    assert result == AnalysisResult(
        summary="A rocket test flight occurred.",
        key_points=("Test flight",),
        tone="neutral",
        reading_time="~1 min",
        keywords=("SpaceX",),
    )
    request = seen[0]
    assert str(request.url) == "http://relay.test/api/analyze"
    body = json.loads(request.content)
    assert body["text"] == "SpaceX launched Starship."
    assert body["config"]["model"] == "vendor/m"
    assert body["config"]["temperature"] == 1.1
    assert set(body["config"]) == {"systemInstruction", "model", "temperature", "responseSchema"}


def test_client_omits_config_when_not_given() -> None:
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=RESULT_JSON)

    asyncio.run(_client(httpx.MockTransport(handler)).analyze("text"))
    assert bodies == [{"text": "text"}]


def test_client_rejects_blank_text_locally() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=RESULT_JSON)

    with pytest.raises(InputError):
        asyncio.run(_client(httpx.MockTransport(handler)).analyze("  "))
    assert calls == []


def test_client_maps_error_statuses() -> None:
    def bad_request(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "Model not found. Check model name."})

    with pytest.raises(ConfigError) as config_error:
        asyncio.run(_client(httpx.MockTransport(bad_request)).analyze("text"))
    assert config_error.value.user_message == "Model not found. Check model name."

    def server_error(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "AI service error"})

    with pytest.raises(ServiceError) as service_error:
        asyncio.run(_client(httpx.MockTransport(server_error)).analyze("text"))
    assert service_error.value.user_message == "AI service error"
    assert service_error.value.upstream_status == 500

    def html_error(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    with pytest.raises(ServiceError) as generic:
        asyncio.run(_client(httpx.MockTransport(html_error)).analyze("text"))
    assert generic.value.user_message == GENERIC_ERROR_MESSAGE


def test_client_connection_failure_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ServiceError) as excinfo:
        asyncio.run(_client(httpx.MockTransport(handler)).analyze("text"))
    assert excinfo.value.user_message == CONNECTION_ERROR_MESSAGE


def test_client_normalizes_base_url() -> None:
    assert AnalyzerApiClient("http://127.0.0.1:8000/").api_base_url == "http://127.0.0.1:8000"


def test_client_rejects_oversized_text_and_invalid_settings_locally() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=RESULT_JSON)

    client = _client(httpx.MockTransport(handler))
    with pytest.raises(InputError) as too_long:
        asyncio.run(client.analyze("a" * (MAX_TEXT_LENGTH + 1)))
    assert too_long.value.user_message == TEXT_TOO_LONG_MESSAGE

    with pytest.raises(ConfigError) as bad_config:
        asyncio.run(client.analyze("text", AppConfig(model="m" * (MAX_MODEL_LENGTH + 1))))
    assert bad_config.value.user_message == INVALID_SETTINGS_MESSAGE
    assert calls == []


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>proxy</html>"),
        httpx.Response(200, json={"summary": "only a summary"}),
    ],
)
def test_client_classifies_unusable_success_bodies(response: httpx.Response) -> None:
    client = _client(httpx.MockTransport(lambda request: response))
    with pytest.raises(MalformedResponseError):
        asyncio.run(client.analyze("text"))


def test_session_with_blank_saved_model_reaches_success() -> None:
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=RESULT_JSON)

    store = ConfigStore(InMemoryConfigPersistence())
    store.update(model="")
    session = AnalysisSession(_client(httpx.MockTransport(handler)), store)

    state = asyncio.run(session.submit("hello"))

    assert state.status == "success"
    assert bodies[0]["config"] == AppConfig(model="").to_json_dict()


def test_session_surfaces_proxy_page_as_error_state() -> None:
    store = ConfigStore(InMemoryConfigPersistence())
    client = _client(
        httpx.MockTransport(lambda request: httpx.Response(200, text="<html>proxy</html>"))
    )
    session = AnalysisSession(client, store)

    state = asyncio.run(session.submit("hello"))

    assert state.status == "error"
    assert state.error == "Invalid JSON response from AI"
    assert state.result is None
