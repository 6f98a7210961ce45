"""Persistent response store interface and an in-memory TTL implementation."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

from constants import Constants
from common.http_models import FetchedResponse, FetchRequest
from common.logging_utils import extra_context, is_debug_enabled, safe_url

logger = logging.getLogger(__name__)


class ResponseStore(Protocol):
    """Storage consulted before the network and as a fallback after failures.

    Keyed by request URL; the storage medium is up to the implementation.
    """

    async def find(self, request: FetchRequest) -> Optional[FetchedResponse]:
        """Return the latest stored response for ``request``, if any."""

    async def save(self, request: FetchRequest, response: FetchedResponse) -> None:
        """Store ``response`` as the latest answer for ``request``."""


@dataclass
class StoreEntry:
    """A single stored response with TTL."""

    value: FetchedResponse
    expires_at: float
    created_at: float = field(default_factory=time.time)

    def is_expired(self, now: Optional[float] = None) -> bool:
        """True once the TTL has elapsed."""
        return (time.time() if now is None else now) > self.expires_at

    @property
    def size(self) -> int:
        """Body size in bytes."""
        return len(self.value.body)


class MemoryResponseStore:
    """TTL store for fetched responses, bounded by entry count and total bytes."""

    def __init__(
        self,
        default_ttl: int = Constants.RESPONSE_CACHE_TTL_SEC,
        max_entries: int = Constants.RESPONSE_CACHE_MAX_ENTRIES,
        max_bytes: int = Constants.RESPONSE_CACHE_MAX_BYTES,
    ):
        """Initialize the store.

        Args:
            default_ttl: Default time-to-live in seconds.
            max_entries: Entry count above which the oldest tenth is evicted.
            max_bytes: Upper bound on the summed body sizes.
        """
        self._default_ttl = default_ttl
        self._entries: Dict[str, StoreEntry] = {}
        self._max_entries = max_entries
        self._max_bytes = max_bytes
        self._current_bytes = 0
        self._lock = threading.Lock()

    async def find(self, request: FetchRequest) -> Optional[FetchedResponse]:
        """Return the stored response for the request URL, or None if missing/expired."""
        with self._lock:
            entry = self._entries.get(request.url)
            if entry is None:
                return None
            if entry.is_expired():
                self._remove_entry(request.url)
                return None
        if is_debug_enabled(logger):
            logger.debug(
                "Response store hit",
                extra=extra_context(
                    event="cache_hit",
                    component="response_store",
                    target=safe_url(request.url),
                ),
            )
        return entry.value

    async def save(self, request: FetchRequest, response: FetchedResponse, ttl: Optional[int] = None) -> None:
        """Store a response under the request URL.

        Args:
            request: Request the response answers.
            response: Response to store.
            ttl: Optional TTL override in seconds.
        """
        body_size = len(response.body)
        if body_size > self._max_bytes // 10:
            # Don't store responses larger than 10% of the byte budget
            return

        with self._lock:
            if request.url in self._entries:
                self._remove_entry(request.url)

            if self._current_bytes + body_size > self._max_bytes:
                self._evict_until(self._max_bytes - body_size)

            effective_ttl = ttl if ttl is not None else self._default_ttl
            self._entries[request.url] = StoreEntry(
                value=response, expires_at=time.time() + effective_ttl
            )
            self._current_bytes += body_size

            if len(self._entries) > self._max_entries:
                self._evict_oldest(max(1, self._max_entries // 10))

    def invalidate(self, url: str) -> None:
        """Drop the stored response for ``url``."""
        with self._lock:
            self._remove_entry(url)

    def clear(self) -> None:
        """Drop every stored response."""
        with self._lock:
            self._entries.clear()
            self._current_bytes = 0

    def stats(self) -> Dict[str, Any]:
        """Entry and byte counts, for diagnostics."""
        now = time.time()
        with self._lock:
            live = [e for e in self._entries.values() if not e.is_expired(now)]
            return {
                "total_entries": len(self._entries),
                "live_entries": len(live),
                "live_bytes": sum(e.size for e in live),
                "current_bytes": self._current_bytes,
                "limits": {"entries": self._max_entries, "bytes": self._max_bytes},
            }

    def _remove_entry(self, url: str) -> None:
        entry = self._entries.pop(url, None)
        if entry:
            self._current_bytes -= entry.size

    def _by_age(self):
        return sorted(self._entries, key=lambda u: self._entries[u].created_at)

    def _evict_oldest(self, count: int) -> None:
        for url in self._by_age()[:count]:
            self._remove_entry(url)

    def _evict_until(self, budget: int) -> None:
        for url in self._by_age():
            if self._current_bytes <= budget:
                break
            self._remove_entry(url)
