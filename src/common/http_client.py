"""Robust fetch: one network attempt, one cache-store fallback, typed failures.

Every request either yields a :class:`FetchResult` (from the network or from
the store) or raises one of :class:`NetworkError`, :class:`AbortError`,
:class:`HTTPError`. There are no retry loops here.
"""
from __future__ import annotations

import asyncio
import logging
import urllib.parse
import urllib.request
from pathlib import Path
from typing import Iterable, Optional

import aiohttp

from constants import Constants
from common.data_url import decode_data_url
from common.errors import AbortError, HTTPError, NetworkError
from common.http_models import FetchedResponse, FetchRequest, FetchResult
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from common.response_store import ResponseStore

logger = logging.getLogger(__name__)


def is_direct_host(url: str, allowed_hosts: Iterable[str] = Constants.DIRECT_HOSTS) -> bool:
    """Return True when ``url`` may be fetched without the relay transport.

    Entries are exact hostnames, or ``*.suffix`` patterns matching any subdomain.
    """
    hostname = (urllib.parse.urlsplit(url).hostname or "").lower()
    if not hostname:
        return False
    for entry in allowed_hosts:
        entry = entry.lower()
        if entry.startswith("*."):
            if hostname.endswith(entry[1:]):
                return True
        elif hostname == entry:
            return True
    return False


class RobustFetcher:
    """Fetches URLs with a cache-first/cache-fallback policy over aiohttp."""

    def __init__(
        self,
        store: Optional[ResponseStore] = None,
        relay_url: Optional[str] = None,
        allowed_hosts: Optional[Iterable[str]] = None,
        timeout: int = Constants.REQUEST_TIMEOUT,
    ):
        """Initialize the fetcher.

        Args:
            store: Persistent response store; None disables caching entirely.
            relay_url: HTTP proxy used for hosts outside ``allowed_hosts``.
            allowed_hosts: Hosts always fetched directly.
            timeout: Total per-request timeout in seconds.
        """
        self._store = store
        self._relay_url = relay_url
        self._allowed_hosts = list(allowed_hosts if allowed_hosts is not None else Constants.DIRECT_HOSTS)
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def store(self) -> Optional[ResponseStore]:
        """The backing response store."""
        return self._store

    async def start(self) -> None:
        """Open the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "RobustFetcher":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def uses_relay(self, url: str) -> bool:
        """Whether ``url`` is routed through the relay transport."""
        if not self._relay_url or not url.startswith(("http:", "https:")):
            return False
        return not is_direct_host(url, self._allowed_hosts)

    async def fetch(self, request: FetchRequest, cache_first: bool = False) -> FetchResult:
        """Fetch ``request``.

        Args:
            request: The request to send.
            cache_first: Consult the store before the network.

        Returns:
            FetchResult with ``from_cache`` telling where the response came from.

        Raises:
            HTTPError: non-2xx response and no stored fallback.
            NetworkError: connectivity failure and no stored fallback.
            AbortError: timeout and no stored fallback.
        """
        safe_target = safe_url(request.url)
        if cache_first:
            cached = await self._attempt_from_store(request)
            if cached is not None:
                return cached

        relayed = self.uses_relay(request.url)
        with Timer() as t:
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP request",
                    extra=extra_context(
                        event="http_request",
                        component="http_client",
                        action="GET",
                        target=safe_target,
                        relayed=relayed,
                    ),
                )
            try:
                response = await self._send(request, relayed)
            except asyncio.TimeoutError as exc:
                return await self._fallback(
                    request, AbortError(str(exc) or "request timed out", request.url)
                )
            except (aiohttp.ClientError, OSError, ValueError) as exc:
                return await self._fallback(request, NetworkError(str(exc), request.url))

        if not response.ok:
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP response not ok",
                    extra=extra_context(
                        event="http_response",
                        component="http_client",
                        outcome="http_error",
                        status_code=response.status,
                        duration_ms=t.duration_ms(),
                        target=safe_target,
                    ),
                )
            return await self._fallback(request, HTTPError(response.status, response.reason, response))

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response ok",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    outcome="success",
                    status_code=response.status,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                ),
            )
        if relayed and self._store is not None and not request.url.startswith("data:"):
            await self._store.save(request, response)
        return FetchResult(response=response, from_cache=False)

    async def _send(self, request: FetchRequest, relayed: bool) -> FetchedResponse:
        """Issue exactly one request over the chosen transport."""
        if request.url.startswith("data:"):
            body, content_type = decode_data_url(request.url)
            return FetchedResponse(
                url=request.url, status=200, reason="OK",
                headers={"Content-Type": content_type}, body=body,
            )
        if request.url.startswith("file:"):
            return self._read_file(request.url)

        if self._session is None:
            await self.start()
        assert self._session is not None
        headers = {"User-Agent": Constants.USER_AGENT, **request.headers}
        async with self._session.get(
            request.url,
            headers=headers,
            proxy=self._relay_url if relayed else None,
        ) as res:
            body = await res.read()
            return FetchedResponse(
                url=str(res.url),
                status=res.status,
                reason=res.reason or "",
                headers={k: v for k, v in res.headers.items()},
                body=body,
            )

    @staticmethod
    def _read_file(url: str) -> FetchedResponse:
        path = Path(urllib.request.url2pathname(urllib.parse.urlsplit(url).path))
        try:
            body = path.read_bytes()
        except FileNotFoundError:
            return FetchedResponse(url=url, status=404, reason="Not Found")
        return FetchedResponse(url=url, status=200, reason="OK", body=body)

    async def _attempt_from_store(self, request: FetchRequest) -> Optional[FetchResult]:
        if self._store is None or request.url.startswith("data:"):
            return None
        cached = await self._store.find(request)
        if cached is None:
            return None
        if not cached.url:
            cached.url = request.url
        return FetchResult(response=cached, from_cache=True)

    async def _fallback(self, request: FetchRequest, error: Exception) -> FetchResult:
        """Answer from the store after a failed attempt, or raise ``error``."""
        cached = await self._attempt_from_store(request)
        if cached is not None:
            logger.warning(
                "Fetch of %s failed (%s); using stored response",
                safe_url(request.url),
                error,
            )
            return cached
        if is_debug_enabled(logger):
            logger.debug(
                "Fetch failed without stored fallback",
                extra=extra_context(
                    event="http_exception",
                    component="http_client",
                    outcome=type(error).__name__,
                    target=safe_url(request.url),
                ),
            )
        raise error
