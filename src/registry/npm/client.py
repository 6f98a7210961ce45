"""NPM registry client: abbreviated package metadata."""

from __future__ import annotations

import logging

from constants import Constants
from common.http_client import RobustFetcher
from common.http_models import FetchRequest
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from registry.document import decode_metadata
from versioning.models import NpmPackageMetadata

logger = logging.getLogger(__name__)


def package_metadata_url(name: str, endpoint: str = Constants.REGISTRY_URL_NPM) -> str:
    """URL of the abbreviated metadata document for ``name``."""
    return f"{endpoint.rstrip('/')}/{name}"


async def get_npm_package_metadata(
    name: str,
    fetcher: RobustFetcher,
    endpoint: str = Constants.REGISTRY_URL_NPM,
    cache_first: bool = False,
) -> NpmPackageMetadata:
    """Fetch ``{endpoint}/{name}`` in the abbreviated install format.

    Args:
        name: Package name, scoped names included (``@scope/pkg``).
        fetcher: Robust fetcher used for the request.
        endpoint: Registry base URL.
        cache_first: Consult the response store before the network.

    Raises:
        NetworkError, AbortError, HTTPError: propagated from the fetcher.
        InvalidMetadataError: the body is not a metadata document.
    """
    url = package_metadata_url(name, endpoint)
    request = FetchRequest(url=url, headers={"Accept": Constants.NPM_METADATA_ACCEPT})
    result = await fetcher.fetch(request, cache_first)
    metadata = decode_metadata(url, result.response, NpmPackageMetadata.from_json)
    if is_debug_enabled(logger):
        logger.debug(
            "Fetched package metadata",
            extra=extra_context(
                event="metadata",
                component="client",
                package_manager="npm",
                target=safe_url(url),
                from_cache=result.from_cache,
                version_count=len(metadata.versions),
            ),
        )
    return metadata
