"""Conversion between URLs and the engine's ``(namespace, path)`` pairs."""

from __future__ import annotations

import re
import urllib.parse
import urllib.request
from dataclasses import dataclass
from pathlib import Path

_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]+:")


@dataclass(frozen=True)
class Resolution:
    """The engine's view of a module location."""

    namespace: str
    path: str


def has_scheme(specifier: str) -> bool:
    """True for absolute URLs (``https:``, ``npm:``, ``data:`` ...).

    Single-letter schemes are rejected so Windows drive paths are not mistaken
    for URLs.
    """
    return bool(_SCHEME.match(specifier))


def is_bare_module_name(name: str) -> bool:
    """True for specifiers that are neither URLs nor ``/``, ``./``, ``../`` paths."""
    if name.startswith(("/", "./", "../")):
        return False
    return not has_scheme(name)


def url_to_resolution(url: str) -> Resolution:
    """Split a URL into namespace and path.

    ``file:`` URLs become filesystem paths; every other URL keeps everything
    after ``<scheme>:`` as its path.
    """
    scheme, _, rest = url.partition(":")
    scheme = scheme.lower()
    if scheme == "file":
        return Resolution(namespace="file", path=urllib.request.url2pathname(urllib.parse.urlsplit(url).path))
    return Resolution(namespace=scheme, path=rest)


def resolution_to_url(namespace: str, path: str) -> str:
    """Inverse of :func:`url_to_resolution`."""
    if namespace == "file":
        return Path(path).absolute().as_uri()
    return f"{namespace}:{path}"
