import sys
from pathlib import Path
from typing import Callable, List, Optional

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient

from scout_gateway import GatewayConfig, create_app


BACKEND_URL = "http://backend.test"
FRAME_HOST = "46.224.249.136:9000"


class FakeBackend:
    """MockTransport handler that records every upstream request."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, json={"ok": True}
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> Optional[httpx.Request]:
        return self.requests[-1] if self.requests else None


@pytest.fixture
def backend():
    """Create a fake analysis backend / frame host."""
    return FakeBackend()


@pytest.fixture
def make_client(backend):
    """Build a TestClient whose upstream traffic goes to the fake backend."""

    def _make(**overrides) -> TestClient:
        settings = {"api_base_url": BACKEND_URL, "allowed_frame_host": FRAME_HOST}
        settings.update(overrides)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(backend))
        return TestClient(create_app(GatewayConfig(**settings), http_client=http_client))

    return _make


@pytest.fixture
def client(make_client):
    return make_client()
