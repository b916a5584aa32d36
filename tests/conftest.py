"""Shared fixtures: a fake Harbor API served through httpx.MockTransport."""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from harbor_exporter.metrics.descriptors import build_descriptors
from harbor_exporter.services.client import HarborClient
from harbor_exporter.services.pager import PagedFetcher

API_PATH = "/api/v2.0"
BASE_URL = "http://harbor.test"

Handler = Callable[[httpx.Request], httpx.Response]


def json_response(payload: Any, status_code: int = 200, headers: Optional[Dict[str, str]] = None) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode(), headers=headers)


def paged(items: List[Any], total_header: bool = True) -> Handler:
    """Serve ``items`` honouring the page/page_size query parameters."""

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params.get("page", "1"))
        size = int(request.url.params.get("page_size", "10"))
        chunk = items[(page - 1) * size: page * size]
        headers = {"x-total-count": str(len(items))} if total_header else None
        return json_response(chunk, headers=headers)

    return handler


class FakeHarbor:
    """Routes requests by path (below the API root) and records them."""

    def __init__(self, api_path: str = API_PATH) -> None:
        self.api_path = api_path
        self.routes: Dict[str, Handler] = {}
        self.requests: List[httpx.Request] = []

    def add(self, path: str, payload: Any = None, handler: Optional[Handler] = None) -> None:
        self.routes[self.api_path + path] = handler or (lambda request: json_response(payload))

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404, text="not found")
        return handler(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls(self, path: str) -> List[httpx.Request]:
        return [request for request in self.requests if request.url.path == self.api_path + path]


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_harbor():
    return FakeHarbor()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def descriptors():
    return build_descriptors()


@pytest_asyncio.fixture
async def harbor_client(fake_harbor):
    client = HarborClient(
        BASE_URL,
        "admin",
        "secret",
        api_path=API_PATH,
        transport=fake_harbor.transport(),
    )
    yield client
    await client.aclose()


@pytest.fixture
def fetcher(harbor_client):
    return PagedFetcher(harbor_client, page_size=10)


class ListSink:
    """Collects samples in memory, in arrival order."""

    def __init__(self) -> None:
        self.samples: list = []

    async def send(self, sample) -> None:
        self.samples.append(sample)


@pytest.fixture
def sink():
    return ListSink()
