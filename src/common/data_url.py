"""Encoding and decoding of RFC 2397 ``data:`` URLs."""
from __future__ import annotations

import base64
import urllib.parse
from typing import Tuple

DEFAULT_MIME = "application/octet-stream"


def to_data_url(data: bytes, mime_type: str = "") -> str:
    """Encode ``data`` as a base64 data URL.

    >>> to_data_url(b"Test data", "text/plain")
    'data:text/plain;base64,VGVzdCBkYXRh'
    """
    mime = mime_type or DEFAULT_MIME
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_url(url: str) -> Tuple[bytes, str]:
    """Return ``(payload, content_type)`` for a data URL.

    Raises:
        ValueError: if ``url`` is not a well-formed data URL.
    """
    if not url.startswith("data:"):
        raise ValueError(f"not a data URL: {url[:32]}")
    header, sep, payload = url[5:].partition(",")
    if not sep:
        raise ValueError("data URL without ',' separator")
    params = header.split(";")
    is_base64 = params[-1].strip().lower() == "base64"
    if is_base64:
        params = params[:-1]
    content_type = ";".join(p.strip() for p in params if p.strip()) or "text/plain;charset=US-ASCII"
    raw = urllib.parse.unquote_to_bytes(payload)
    if is_base64:
        try:
            return base64.b64decode(raw, validate=False), content_type
        except (ValueError, TypeError) as exc:
            raise ValueError(f"invalid base64 payload: {exc}") from exc
    return raw, content_type
