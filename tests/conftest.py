"""Shared test doubles: a scripted fetcher and a dummy aiohttp session."""

import json
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Tuple, Union

import pytest

from common.errors import HTTPError
from common.http_models import FetchedResponse, FetchRequest, FetchResult


class FakeFetcher:
    """Serves canned responses by URL and records every request."""

    def __init__(self, routes: Optional[Dict[str, Any]] = None, cached: Optional[Dict[str, Any]] = None):
        self.routes: Dict[str, Any] = dict(routes or {})
        self.cached: Dict[str, Any] = dict(cached or {})
        self.calls: List[Tuple[str, bool]] = []

    @staticmethod
    def _response(url: str, value: Any) -> FetchedResponse:
        if isinstance(value, FetchedResponse):
            return value
        if isinstance(value, Exception):
            raise value
        content_type = ""
        if isinstance(value, tuple):
            value, content_type = value
        if isinstance(value, (dict, list)):
            body = json.dumps(value).encode("utf-8")
            content_type = content_type or "application/json"
        elif isinstance(value, str):
            body = value.encode("utf-8")
        else:
            body = value
        headers = {"Content-Type": content_type} if content_type else {}
        return FetchedResponse(url=url, status=200, reason="OK", headers=headers, body=body)

    async def fetch(self, request: FetchRequest, cache_first: bool = False) -> FetchResult:
        self.calls.append((request.url, cache_first))
        if cache_first and request.url in self.cached:
            return FetchResult(response=self._response(request.url, self.cached[request.url]), from_cache=True)
        if request.url not in self.routes:
            raise HTTPError(404, "Not Found", FetchedResponse(url=request.url, status=404, reason="Not Found"))
        return FetchResult(response=self._response(request.url, self.routes[request.url]), from_cache=False)

    def urls(self) -> List[str]:
        return [url for url, _ in self.calls]


class DummyResponse:
    """Minimal stand-in for aiohttp.ClientResponse."""

    def __init__(self, url: str, status: int = 200, reason: str = "OK",
                 body: Union[bytes, str] = b"", headers: Optional[Dict[str, str]] = None):
        self.url = url
        self.status = status
        self.reason = reason
        self.headers = headers or {}
        self._body = body.encode("utf-8") if isinstance(body, str) else body

    async def read(self) -> bytes:
        return self._body


class DummySession:
    """Minimal stand-in for aiohttp.ClientSession.get()."""

    def __init__(self, responses: Optional[Dict[str, Any]] = None, error: Optional[BaseException] = None):
        self.responses = responses or {}
        self.error = error
        self.requests: List[Dict[str, Any]] = []
        self.closed = False

    @asynccontextmanager
    async def get(self, url, headers=None, proxy=None):
        self.requests.append({"url": url, "headers": headers or {}, "proxy": proxy})
        if self.error is not None:
            raise self.error
        response = self.responses.get(url)
        if response is None:
            response = DummyResponse(url, status=404, reason="Not Found")
        yield response

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_fetcher():
    """Factory for FakeFetcher instances."""
    return FakeFetcher


@pytest.fixture
def dummy_session():
    """Factory for DummySession instances."""
    return DummySession


@pytest.fixture
def dummy_response():
    """Factory for DummyResponse instances."""
    return DummyResponse
