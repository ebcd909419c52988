"""Tests for the Gemini HTTP transport."""

import httpx
import pytest

from tryon_agent.providers.gemini import GeminiTransport
from tryon_agent.utils.config import Config, GenerationSettings
from tryon_agent.utils.errors import TransportError

ENDPOINT = "https://example.test/v1beta/models/image-model:generateContent"


def _transport(handler, **kwargs) -> GeminiTransport:
    return GeminiTransport(
        api_key="secret-key",
        endpoint=ENDPOINT,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


async def test_posts_json_with_header_credential():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = request.content
        return httpx.Response(200, content=b'{"candidates": []}')

    async with _transport(handler) as transport:
        response = await transport.send(b'{"contents": []}')

    assert response.status_code == 200
    assert response.content == b'{"candidates": []}'
    assert seen["method"] == "POST"
    assert seen["url"] == ENDPOINT
    assert seen["headers"]["content-type"] == "application/json"
    assert seen["headers"]["x-goog-api-key"] == "secret-key"
    assert seen["body"] == b'{"contents": []}'


async def test_query_credential_mode():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, content=b"{}")

    async with _transport(handler, credential_mode="query") as transport:
        await transport.send(b"{}")

    request = seen["request"]
    assert request.url.params["key"] == "secret-key"
    assert "x-goog-api-key" not in request.headers


async def test_non_200_is_returned_not_raised():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, content=b"overloaded")

    async with _transport(handler) as transport:
        response = await transport.send(b"{}")

    assert response.status_code == 503
    assert response.content == b"overloaded"


async def test_timeout_raises_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with _transport(handler, timeout=5.0) as transport:
        with pytest.raises(TransportError, match="timed out after 5.0s"):
            await transport.send(b"{}")


async def test_connect_error_raises_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _transport(handler) as transport:
        with pytest.raises(TransportError, match="ConnectError"):
            await transport.send(b"{}")


async def test_send_requires_initialize():
    transport = _transport(lambda request: httpx.Response(200))

    with pytest.raises(RuntimeError, match="not initialized"):
        await transport.send(b"{}")


def test_unknown_credential_mode():
    with pytest.raises(ValueError):
        GeminiTransport(api_key="k", credential_mode="cookie")


async def test_from_config_uses_endpoint_timeout_and_credential_mode():
    config = Config(
        gemini_api_key="cfg-key",
        gemini_endpoint=ENDPOINT,
        gemini_credential_mode="query",
        generation=GenerationSettings(timeout_seconds=12.0),
    )
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, content=b"{}")

    transport = GeminiTransport.from_config(config, transport=httpx.MockTransport(handler))
    async with transport:
        await transport.send(b"{}")

    assert transport.timeout == 12.0
    assert transport.credential_mode == "query"
    assert seen["request"].url.params["key"] == "cfg-key"
    assert str(seen["request"].url).startswith(ENDPOINT)


async def test_lifecycle():
    transport = _transport(lambda request: httpx.Response(200))
    assert not transport.is_open

    await transport.initialize()
    await transport.initialize()
    assert transport.is_open

    await transport.close()
    await transport.close()
    assert not transport.is_open
