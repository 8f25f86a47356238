"""Tests for the forwarding primitive and base address handling."""

import logging

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from scout_gateway import proxy
from scout_gateway.errors import ServerMisconfigured
from scout_gateway.proxy import forward, resolve_base_url
from scout_gateway.state import GatewayConfig, GatewayState


def _relay_app(http_client: httpx.AsyncClient, **options) -> FastAPI:
    app = FastAPI()

    @app.api_route("/relay", methods=["PUT", "GET"])
    async def relay(request: Request):
        return await forward(http_client, request, "http://backend.test/thing", **options)

    return app


def test_method_override_replaces_inbound_method(backend):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(backend))
    client = TestClient(_relay_app(http_client, method_override="post"))

    client.put("/relay", content=b"payload", headers={"content-type": "text/csv"})

    assert backend.last.method == "POST"
    assert backend.last.content == b"payload"
    assert backend.last.headers["content-type"] == "text/csv"


def test_inbound_method_used_without_override(backend):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(backend))
    client = TestClient(_relay_app(http_client))

    client.put("/relay", content=b"x")
    assert backend.last.method == "PUT"


def test_include_body_false_drops_body(backend):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(backend))
    client = TestClient(_relay_app(http_client, include_body=False))

    client.put("/relay", content=b"should not be sent")
    assert backend.last.content == b""


def test_large_body_is_streamed_back_unchanged(backend):
    blob = bytes(range(256)) * 4096
    backend.handler = lambda request: httpx.Response(
        200, content=blob, headers={"content-type": "application/octet-stream"}
    )
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(backend))
    client = TestClient(_relay_app(http_client))

    response = client.get("/relay")
    assert response.content == blob
    assert response.headers["cache-control"] == "no-store"


def test_resolve_base_url_validation():
    with pytest.raises(ServerMisconfigured) as excinfo:
        resolve_base_url(None)
    assert excinfo.value.status_code == 500
    assert not excinfo.value.plain_text

    with pytest.raises(ServerMisconfigured) as excinfo:
        resolve_base_url("ftp://backend.test", plain_text=True)
    assert excinfo.value.plain_text
    assert "http:// or https://" in excinfo.value.message

    assert resolve_base_url("https://backend.test/api/") == "https://backend.test/api"


def test_base_url_host_logged_once(monkeypatch, caplog):
    monkeypatch.setattr(proxy, "_base_url_logged", False)
    with caplog.at_level(logging.INFO, logger="scout_gateway.proxy"):
        resolve_base_url("http://backend.test:8000")
        resolve_base_url("http://backend.test:8000")
    host_lines = [r for r in caplog.records if "API_BASE_URL host" in r.getMessage()]
    assert len(host_lines) == 1
    assert "backend.test:8000" in host_lines[0].getMessage()


@pytest.mark.asyncio
async def test_state_closes_only_its_own_client():
    injected = httpx.AsyncClient()
    state = GatewayState(config=GatewayConfig(), http_client=injected)
    await state.close()
    assert not injected.is_closed
    await injected.aclose()

    owned_state = GatewayState(config=GatewayConfig(request_timeout=5.0))
    owned = owned_state.get_client()
    assert owned.timeout.read == 5.0
    await owned_state.close()
    assert owned.is_closed
    assert owned_state.http_client is None
