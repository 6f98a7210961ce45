"""Request/response value types shared by the fetch layer and the cache store."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class FetchRequest:
    """A GET request. The URL is also the cache key."""

    url: str
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class FetchedResponse:
    """A fully read response.

    Bodies are read eagerly so a response can be cached, replayed and
    inspected after the underlying connection is released.
    """

    url: str
    status: int
    reason: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status < 300

    @property
    def content_type(self) -> str:
        """The Content-Type header, matched case-insensitively."""
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value
        return ""

    def text(self, encoding: str = "utf-8") -> str:
        """Decode the body, replacing undecodable bytes."""
        return self.body.decode(encoding, errors="replace")

    def json(self) -> Any:
        """Parse the body as JSON."""
        return json.loads(self.body)


@dataclass
class FetchResult:
    """A successful fetch and whether the cache store satisfied it."""

    response: FetchedResponse
    from_cache: bool
