"""Shared pytest fixtures for the kavita-source test suite."""

import base64
import json
import time
from typing import Callable

import httpx
import pytest

from kavita_source.models import Credentials
from kavita_source.storage import Storage


BASE_URL = "http://kavita.local/"
API_KEY = "test-api-key"


def _b64url(data: dict) -> str:
    raw = json.dumps(data).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Returns a factory building unsigned JWTs with the given exp claim."""

    def _make(exp: int, **claims) -> str:
        header = _b64url({"alg": "HS512", "typ": "JWT"})
        payload = _b64url({"name": "reader", "nameid": 1, "exp": exp, **claims})
        return f"{header}.{payload}.signature"

    return _make


@pytest.fixture
def future_exp() -> int:
    return int(time.time()) + 3600


@pytest.fixture
def past_exp() -> int:
    return int(time.time()) - 3600


@pytest.fixture
def tmp_storage(tmp_path) -> Storage:
    """Returns a Storage instance using a temporary directory."""
    return Storage(base_path=tmp_path)


@pytest.fixture
def configured_storage(tmp_path) -> Storage:
    """Returns a Storage holding a server URL and API key."""
    storage = Storage(base_path=tmp_path / "configured")
    storage.save_credentials(Credentials(url=BASE_URL, api_key=API_KEY))
    return storage


class FakeKavita:
    """Routes httpx requests to canned responses and records every call."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, response) -> None:
        if isinstance(response, httpx.Response):
            self.routes[(method, path)] = lambda request: response
        elif callable(response):
            self.routes[(method, path)] = response
        else:
            self.routes[(method, path)] = lambda request: httpx.Response(200, json=response)

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, text="not found")
        return route(request)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_kavita() -> FakeKavita:
    return FakeKavita()
