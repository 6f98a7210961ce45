"""Version resolvers for the supported registries."""

from typing import Optional

from constants import Constants, Registry
from common.http_client import RobustFetcher
from ..cache import ResolvedVersions
from ..parser import parse_package_specifier
from .base import VersionResolver
from .jsr import JsrVersionResolver
from .npm import NpmVersionResolver


def build_resolver(
    registry: Registry,
    fetcher: RobustFetcher,
    resolved_versions: Optional[ResolvedVersions] = None,
    cache_first: bool = False,
    npm_registry: str = Constants.REGISTRY_URL_NPM,
    npm_cdn: str = Constants.CDN_URL_NPM,
    jsr_registry: str = Constants.REGISTRY_URL_JSR,
) -> VersionResolver:
    """Return the resolver for ``registry`` configured with the given endpoints."""
    if registry == Registry.JSR:
        return JsrVersionResolver(fetcher, resolved_versions, cache_first, endpoint=jsr_registry)
    return NpmVersionResolver(
        fetcher, resolved_versions, cache_first, endpoint=npm_registry, cdn=npm_cdn
    )


async def resolve_specifier(
    specifier: str,
    fetcher: RobustFetcher,
    resolved_versions: Optional[ResolvedVersions] = None,
    cache_first: bool = False,
    **endpoints: str,
) -> str:
    """Parse an ``npm:``/``jsr:`` specifier and resolve it to a resource URL.

    Raises:
        SpecifierError: the specifier is malformed.
        ResolutionError: no matching version or entry point.
        FetchError: registry metadata could not be fetched.
    """
    spec = parse_package_specifier(specifier)
    resolver = build_resolver(spec.registry, fetcher, resolved_versions, cache_first, **endpoints)
    return await resolver.resolve(spec)


__all__ = [
    "VersionResolver",
    "NpmVersionResolver",
    "JsrVersionResolver",
    "build_resolver",
    "resolve_specifier",
]
