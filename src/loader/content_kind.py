"""Content-kind classification of fetched modules."""

from __future__ import annotations

import re
import urllib.parse

from constants import ContentKind

_KNOWN = {kind.value: kind for kind in ContentKind}
_EXTENSION_ALIASES = {
    "mjs": ContentKind.JS,
    "cjs": ContentKind.JS,
    "mts": ContentKind.TS,
    "cts": ContentKind.TS,
}
_TEXT_SUBTYPE = re.compile(r"^(?:plain$|xml|svg|x?html)")


def extension_of(url: str) -> str:
    """Extension of the last path segment, lower-cased; '' when there is none."""
    if url.startswith("data:"):
        return ""
    path = urllib.parse.urlsplit(url).path
    segment = path.rsplit("/", 1)[-1]
    if "." not in segment:
        return ""
    return segment.rsplit(".", 1)[-1].lower()


def mime_type_to_loader(mime_type: str) -> ContentKind:
    """Map a MIME type to a content kind by its subtype."""
    subtype = mime_type.split("/", 1)[1] if "/" in mime_type else "plain"
    subtype = subtype.strip().lower() or "plain"
    if _TEXT_SUBTYPE.match(subtype):
        return ContentKind.TEXT
    if subtype.startswith("json"):
        return ContentKind.JSON
    if subtype == "javascript":
        return ContentKind.JS
    if subtype == "typescript":
        return ContentKind.TS
    if subtype == "css":
        return ContentKind.CSS
    return ContentKind.TEXT


def response_to_loader(url: str, content_type: str = "") -> ContentKind:
    """Pick the content kind from the URL extension, falling back to the MIME type."""
    ext = extension_of(url)
    if ext in _KNOWN:
        return _KNOWN[ext]
    if ext in _EXTENSION_ALIASES:
        return _EXTENSION_ALIASES[ext]
    mime_type = (content_type or "text/plain").split(";", 1)[0].strip() or "text/plain"
    return mime_type_to_loader(mime_type)
