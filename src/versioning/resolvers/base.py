"""Base class for registry-backed version resolvers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import semantic_version

from constants import Constants, Registry
from common.errors import InvalidEntryPointError, InvalidPackageVersionError
from common.http_client import RobustFetcher
from common.logging_utils import extra_context, is_debug_enabled
from ..cache import ExportMap, ResolvedVersions
from ..models import PackageSpecifier

logger = logging.getLogger(__name__)


def summarize_versions(versions: List[str], shown: int = Constants.AVAILABLE_VERSIONS_SHOWN) -> List[str]:
    """First ``shown`` versions plus a ``+N more`` marker when truncated."""
    head = list(versions[:shown])
    if len(versions) > shown:
        head.append(f"+{len(versions) - shown} more")
    return head


def invalid_version_error(spec: PackageSpecifier, versions: List[str]) -> InvalidPackageVersionError:
    """Build the error raised when no version satisfies ``spec.range``."""
    shown = Constants.AVAILABLE_VERSIONS_SHOWN
    listing = ", ".join(versions[:shown])
    if len(versions) > shown:
        listing += f", ... ({len(versions) - shown} more versions)"
    return InvalidPackageVersionError(
        package_name=spec.name,
        tag=spec.tag,
        entry_point=spec.entry_point,
        available_versions=summarize_versions(versions),
        message=f'No version of {spec.name} satisfies "{spec.tag or "*"}" (available: {listing})',
    )


class VersionResolver(ABC):
    """Resolves a package specifier to a resource URL.

    Subclasses provide the registry lookups; the memoization against
    :class:`ResolvedVersions` and the version arithmetic live here.
    """

    def __init__(
        self,
        fetcher: RobustFetcher,
        resolved_versions: Optional[ResolvedVersions] = None,
        cache_first: bool = False,
    ):
        self.fetcher = fetcher
        self.resolved_versions = resolved_versions
        self.cache_first = cache_first

    @property
    @abstractmethod
    def registry(self) -> Registry:
        """Registry this resolver talks to."""

    @abstractmethod
    async def fetch_candidates(self, spec: PackageSpecifier) -> Dict[str, Any]:
        """Return the published versions of ``spec.name``, keyed by version string."""

    @abstractmethod
    async def fetch_exports(
        self, spec: PackageSpecifier, version: semantic_version.Version, candidates: Dict[str, Any]
    ) -> ExportMap:
        """Return the export map of the chosen version."""

    @abstractmethod
    def resource_url(self, name: str, version: str, path: str) -> str:
        """URL the bundler should load for ``path`` inside ``name@version``."""

    def pick(self, spec: PackageSpecifier, candidates: Dict[str, Any]) -> semantic_version.Version:
        """Highest parseable candidate satisfying ``spec.range``.

        Raises:
            InvalidPackageVersionError: nothing satisfies the range.
        """
        parsed = []
        for raw in candidates:
            try:
                parsed.append(semantic_version.Version(raw))
            except ValueError:
                continue  # Skip invalid versions
        best = spec.range.select(parsed)
        if best is None:
            raise invalid_version_error(spec, list(candidates))
        return best

    def _lookup(self, spec: PackageSpecifier, version: semantic_version.Version, exports: ExportMap) -> str:
        path = exports.get(spec.entry_point)
        if not path:
            raise InvalidEntryPointError(spec.name, spec.tag, spec.entry_point, list(exports))
        return self.resource_url(spec.name, str(version), path)

    async def resolve(self, spec: PackageSpecifier) -> str:
        """Resolve ``spec`` to a resource URL, reusing this build's earlier resolutions.

        Raises:
            InvalidPackageVersionError, InvalidEntryPointError: resolution failed.
            NetworkError, AbortError, HTTPError: a metadata fetch failed.
            InvalidMetadataError: a metadata document was unusable.
        """
        if self.resolved_versions is not None:
            hit = self.resolved_versions.max_satisfying(spec.name, spec.range)
            if hit is not None:
                version, exports = hit
                if is_debug_enabled(logger):
                    logger.debug(
                        "Resolved from build cache",
                        extra=extra_context(
                            event="resolve",
                            component="version_resolver",
                            outcome="cache_hit",
                            package_manager=self.registry.value,
                            package=spec.name,
                            version=str(version),
                        ),
                    )
                return self._lookup(spec, version, exports)

        candidates = await self.fetch_candidates(spec)
        version = self.pick(spec, candidates)
        exports = await self.fetch_exports(spec, version, candidates)
        url = self._lookup(spec, version, exports)
        if self.resolved_versions is not None:
            self.resolved_versions.append(spec.name, version, exports)
        logger.info("Resolved %s:%s@%s -> %s", self.registry.value, spec.name, spec.tag or "*", version)
        return url
