"""NPM version resolver using semantic versioning."""

import urllib.parse
from typing import Any, Dict, Optional

import semantic_version

from constants import Constants, Registry
from common.http_client import RobustFetcher
from registry.npm.client import get_npm_package_metadata
from ..cache import ExportMap, ResolvedVersions
from ..models import PackageSpecifier
from .base import VersionResolver

ROOT_EXPORTS = {".": "./"}


def synthesize_exports(exports: Any) -> ExportMap:
    """Identity-map the subpath keys of a package.json ``exports`` field.

    Missing exports, the string shorthand and condition-only objects
    (``{"import": ..., "require": ...}``) all describe just the root.
    Conditions and wildcard patterns are not interpreted.
    """
    if not isinstance(exports, dict) or not any(str(k).startswith(".") for k in exports):
        return dict(ROOT_EXPORTS)
    return {key: key for key in exports}


class NpmVersionResolver(VersionResolver):
    """Resolver for npm packages, producing CDN-mirror URLs."""

    def __init__(
        self,
        fetcher: RobustFetcher,
        resolved_versions: Optional[ResolvedVersions] = None,
        cache_first: bool = False,
        endpoint: str = Constants.REGISTRY_URL_NPM,
        cdn: str = Constants.CDN_URL_NPM,
    ):
        super().__init__(fetcher, resolved_versions, cache_first)
        self.endpoint = endpoint
        self.cdn = cdn

    @property
    def registry(self) -> Registry:
        """Return npm registry."""
        return Registry.NPM

    async def fetch_candidates(self, spec: PackageSpecifier) -> Dict[str, Any]:
        """Fetch the version objects from the npm packument.

        Args:
            spec: Package specifier

        Returns:
            Mapping of version string to its abbreviated version object
        """
        metadata = await get_npm_package_metadata(
            spec.name, self.fetcher, endpoint=self.endpoint, cache_first=self.cache_first
        )
        return metadata.versions

    async def fetch_exports(
        self, spec: PackageSpecifier, version: semantic_version.Version, candidates: Dict[str, Any]
    ) -> ExportMap:
        """Read exports from the version object already in the packument."""
        info = candidates.get(str(version)) or {}
        return synthesize_exports(info.get("exports"))

    def resource_url(self, name: str, version: str, path: str) -> str:
        """``{cdn}/{name}@{version}/{path}``"""
        return urllib.parse.urljoin(f"{self.cdn.rstrip('/')}/{name}@{version}/", path)
