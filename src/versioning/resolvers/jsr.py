"""JSR version resolver."""

import urllib.parse
from typing import Any, Dict, Optional

import semantic_version

from constants import Constants, Registry
from common.http_client import RobustFetcher
from registry.jsr.client import get_jsr_package_metadata, get_jsr_package_version_metadata
from ..cache import ExportMap, ResolvedVersions
from ..models import PackageSpecifier
from .base import VersionResolver


class JsrVersionResolver(VersionResolver):
    """Resolver for JSR packages, producing registry file URLs."""

    def __init__(
        self,
        fetcher: RobustFetcher,
        resolved_versions: Optional[ResolvedVersions] = None,
        cache_first: bool = False,
        endpoint: str = Constants.REGISTRY_URL_JSR,
    ):
        super().__init__(fetcher, resolved_versions, cache_first)
        self.endpoint = endpoint

    @property
    def registry(self) -> Registry:
        """Return JSR registry."""
        return Registry.JSR

    async def fetch_candidates(self, spec: PackageSpecifier) -> Dict[str, Any]:
        """Fetch the version listing from ``meta.json``.

        Yanked versions stay in the listing and remain selectable.
        """
        metadata = await get_jsr_package_metadata(
            spec.name, self.fetcher, endpoint=self.endpoint, cache_first=self.cache_first
        )
        return metadata.versions

    async def fetch_exports(
        self, spec: PackageSpecifier, version: semantic_version.Version, candidates: Dict[str, Any]
    ) -> ExportMap:
        """Fetch ``{version}_meta.json`` for its export map."""
        metadata = await get_jsr_package_version_metadata(
            spec.name, str(version), self.fetcher, endpoint=self.endpoint, cache_first=self.cache_first
        )
        return metadata.exports

    def resource_url(self, name: str, version: str, path: str) -> str:
        """``{registry}/{name}/{version}/{path}``"""
        return urllib.parse.urljoin(f"{self.endpoint.rstrip('/')}/{name}/{version}/", path)
