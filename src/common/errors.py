"""Exception hierarchy for resolution and loading failures.

Library layers raise these; the hook layer in ``loader.plugin`` converts them
into error or warning messages for the bundling engine.
"""
from __future__ import annotations

from typing import Any, List, Optional


class RemoteLoadError(Exception):
    """Base class for every failure this package reports."""


# --- transport ---------------------------------------------------------------


class FetchError(RemoteLoadError):
    """A request could not be satisfied by the network nor by the cache store."""

    def __init__(self, message: str, url: str):
        super().__init__(message)
        self.message = message
        self.url = url


class NetworkError(FetchError):
    """Connectivity failure (DNS, refused connection, TLS, reset)."""


class AbortError(FetchError):
    """The request was aborted before a response arrived (timeout)."""


class HTTPError(FetchError):
    """The server answered with a non-2xx status."""

    def __init__(self, status: int, reason: str, response: Any):
        super().__init__(f"{status} {reason}".strip(), response.url)
        self.status = status
        self.reason = reason
        self.response = response


# --- specifier parsing -------------------------------------------------------


class SpecifierError(RemoteLoadError):
    """A package specifier could not be parsed."""

    def __init__(self, specifier: str, message: Optional[str] = None):
        super().__init__(message or f"{type(self).__name__}: {specifier}")
        self.specifier = specifier


class NotNpmProtocolError(SpecifierError):
    """The specifier does not use the ``npm:`` scheme."""


class NotJsrProtocolError(SpecifierError):
    """The specifier does not use the ``jsr:`` scheme."""


class OnlyScopeProvidedError(SpecifierError):
    """An npm scope was given without a package segment."""


class PackageNotFoundError(SpecifierError):
    """No package name could be extracted."""


class ScopeNotFoundError(SpecifierError):
    """A JSR specifier whose name does not start with ``@``."""


# --- version resolution ------------------------------------------------------


class ResolutionError(RemoteLoadError):
    """A parsed specifier could not be mapped to a resource URL."""

    def __init__(self, message: str, package_name: str, tag: Optional[str], entry_point: str):
        super().__init__(message)
        self.message = message
        self.package_name = package_name
        self.tag = tag
        self.entry_point = entry_point


class InvalidPackageVersionError(ResolutionError):
    """No published version satisfies the requested range."""

    def __init__(
        self,
        package_name: str,
        tag: Optional[str],
        entry_point: str,
        available_versions: List[str],
        message: str,
    ):
        super().__init__(message, package_name, tag, entry_point)
        self.available_versions = available_versions


class InvalidEntryPointError(ResolutionError):
    """The resolved version does not export the requested entry point."""

    def __init__(
        self,
        package_name: str,
        tag: Optional[str],
        entry_point: str,
        available_entry_points: List[str],
    ):
        message = (
            f"{entry_point} is not a valid entry point for {package_name}@{tag or '*'} "
            f"(available: {', '.join(available_entry_points)})"
        )
        super().__init__(message, package_name, tag, entry_point)
        self.available_entry_points = available_entry_points


# --- source maps -------------------------------------------------------------


class SourceMapError(RemoteLoadError):
    """Base class for source-map reference problems."""


class NotFoundError(SourceMapError):
    """The text carries no ``sourceMappingURL`` comment."""


class InvalidURLError(SourceMapError):
    """The ``sourceMappingURL`` value cannot be resolved to a URL."""


# --- import maps -------------------------------------------------------------


class ImportMapError(RemoteLoadError):
    """A specifier matched an import map entry that is blocked or backtracks."""


# --- registry metadata -------------------------------------------------------


class InvalidMetadataError(RemoteLoadError):
    """A registry answered 2xx with a body that is not a metadata document."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Invalid registry metadata from {url}: {reason}")
        self.url = url
        self.reason = reason
