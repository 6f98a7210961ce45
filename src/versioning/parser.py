"""Parsing of ``npm:`` and ``jsr:`` package specifiers."""

from typing import Optional, Tuple

import semantic_version

from constants import Registry
from common.errors import (
    NotJsrProtocolError,
    NotNpmProtocolError,
    OnlyScopeProvidedError,
    PackageNotFoundError,
    ScopeNotFoundError,
)
from .models import PackageSpecifier

WILDCARD = "*"


def parse_range(tag: Optional[str]) -> semantic_version.NpmSpec:
    """Turn a version tag into an npm-style range.

    Tags that are not valid ranges (dist-tags such as ``latest``, or syntax
    this library does not know) accept any version instead of failing.
    """
    if tag:
        try:
            return semantic_version.NpmSpec(tag)
        except ValueError:
            pass
    return semantic_version.NpmSpec(WILDCARD)


def _split_scheme(specifier: str) -> Tuple[str, str]:
    """Return (lower-cased scheme, path without query/fragment)."""
    scheme, sep, rest = specifier.partition(":")
    if not sep:
        return "", specifier
    for marker in ("?", "#"):
        rest = rest.split(marker, 1)[0]
    return scheme.lower(), rest


def _finish(registry: Registry, path: str, start: int, version_at: int, path_at: int) -> PackageSpecifier:
    if path_at == -1:
        path_at = len(path)
    if version_at == -1:
        version_at = len(path)
    version_at = min(version_at, path_at)

    name = path[start:version_at]
    tag = path[version_at + 1:path_at] or None
    raw_entry = path[path_at + 1:]
    return PackageSpecifier(
        registry=registry,
        name=name,
        range=parse_range(tag),
        entry_point=f"./{raw_entry}" if raw_entry else ".",
        tag=tag,
    )


def parse_npm_specifier(specifier: str) -> PackageSpecifier:
    """Parse ``npm:<name>[@<tag>][/<subpath>]``.

    Raises:
        NotNpmProtocolError: scheme is not ``npm:``.
        OnlyScopeProvidedError: ``npm:@scope`` with nothing after it.
        PackageNotFoundError: the name is empty.
    """
    scheme, path = _split_scheme(specifier)
    if scheme != Registry.NPM.value:
        raise NotNpmProtocolError(specifier)

    start = 1 if path.startswith("/") else 0
    if path[start:start + 1] == "@":
        first_slash = path.find("/", start)
        if first_slash == -1:
            raise OnlyScopeProvidedError(specifier)
        path_at = path.find("/", first_slash + 1)
        version_at = path.find("@", first_slash + 1)
    else:
        path_at = path.find("/", start)
        version_at = path.find("@", start)

    end = min(i for i in (path_at, version_at, len(path)) if i != -1)
    if end == start:
        raise PackageNotFoundError(specifier)
    return _finish(Registry.NPM, path, start, version_at, path_at)


def parse_jsr_specifier(specifier: str) -> PackageSpecifier:
    """Parse ``jsr:@<scope>/<name>[@<tag>][/<subpath>]``.

    Raises:
        NotJsrProtocolError: scheme is not ``jsr:``.
        ScopeNotFoundError: the name does not start with ``@``.
        PackageNotFoundError: a scope with no package segment.
    """
    scheme, path = _split_scheme(specifier)
    if scheme != Registry.JSR.value:
        raise NotJsrProtocolError(specifier)

    start = 1 if path.startswith("/") else 0
    if path[start:start + 1] != "@":
        raise ScopeNotFoundError(specifier)
    first_slash = path.find("/", start)
    if first_slash == -1:
        raise PackageNotFoundError(specifier)
    path_at = path.find("/", first_slash + 1)
    version_at = path.find("@", first_slash + 1)
    return _finish(Registry.JSR, path, start, version_at, path_at)


def parse_package_specifier(specifier: str) -> PackageSpecifier:
    """Dispatch on the scheme to the npm or JSR parser."""
    scheme, _ = _split_scheme(specifier)
    if scheme == Registry.JSR.value:
        return parse_jsr_specifier(specifier)
    return parse_npm_specifier(specifier)
