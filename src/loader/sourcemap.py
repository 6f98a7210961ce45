"""Locating and inlining ``sourceMappingURL`` references.

The scan is done by hand around a small regular expression so that very large
or truncated (minified, unterminated comment) inputs are still handled.
"""

from __future__ import annotations

import logging
import re
import urllib.parse
from dataclasses import dataclass
from typing import List, Tuple

from common.data_url import to_data_url
from common.errors import FetchError, InvalidURLError, NotFoundError
from common.http_client import RobustFetcher
from common.http_models import FetchRequest
from common.logging_utils import safe_url

logger = logging.getLogger(__name__)

_COMMENT = re.compile(r"/([*/])[#@] *sourceMappingURL=")
SOURCE_MAP_MIME = "application/json"


@dataclass(frozen=True)
class SourceMapReference:
    """The resolved map URL and the ``[start, end)`` span of the raw URL token."""

    url: str
    start: int
    end: int


def _scan(code: str):
    n = len(code)
    for match in _COMMENT.finditer(code):
        start = match.end()
        end = start
        while end < n and ord(code[end]) > 32:
            end += 1
        if end == start:
            continue
        if match.group(1) == "/" or code.find("*/", end) > 0:
            return code[start:end], start, end
    return None


def _join(base: str, url: str) -> str:
    try:
        joined = urllib.parse.urljoin(base, url) if base else url
        parts = urllib.parse.urlsplit(joined)
    except ValueError as exc:
        raise InvalidURLError(f"Invalid URL: {url}") from exc
    if not parts.scheme or (parts.scheme in ("http", "https") and not parts.netloc):
        raise InvalidURLError(f"Invalid URL: {url}")
    return joined


def extract_source_map_url(code: str, base: str) -> SourceMapReference:
    """Find the source map reference in ``code`` and resolve it against ``base``.

    Raises:
        NotFoundError: no ``sourceMappingURL`` comment.
        InvalidURLError: the reference does not form a valid URL.
    """
    found = _scan(code)
    if found is None:
        raise NotFoundError("Source map URL is not found")
    raw, start, end = found
    return SourceMapReference(url=_join(base, raw), start=start, end=end)


async def inline_source_map(
    code: str,
    base: str,
    fetcher: RobustFetcher,
    cache_first: bool = False,
) -> Tuple[str, List[str]]:
    """Replace an external source map reference with a base64 data URL.

    Returns the (possibly rewritten) code and warning texts. Code without a
    reference, or already pointing at a ``data:`` URL, comes back unchanged.
    """
    try:
        ref = extract_source_map_url(code, base)
    except NotFoundError:
        return code, []
    except InvalidURLError as exc:
        return code, [str(exc)]
    if ref.url.startswith("data:"):
        return code, []

    try:
        result = await fetcher.fetch(FetchRequest(url=ref.url), cache_first)
    except FetchError as exc:
        logger.warning("Could not fetch source map %s: %s", safe_url(ref.url), exc)
        return code, [f"Failed to fetch source map {ref.url}: {exc}"]

    response = result.response
    mime = response.content_type.split(";", 1)[0].strip() or SOURCE_MAP_MIME
    data_url = to_data_url(response.body, mime)
    return code[:ref.start] + data_url + code[ref.end:], []
