"""JSR registry client: package and package-version metadata.

See https://jsr.io/docs/api#package-metadata for the document shapes.
"""

from __future__ import annotations

import logging

from constants import Constants
from common.http_client import RobustFetcher
from common.http_models import FetchRequest
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from registry.document import decode_metadata
from versioning.models import JsrPackageMetadata, JsrPackageVersionMetadata

logger = logging.getLogger(__name__)


def package_metadata_url(name: str, endpoint: str = Constants.REGISTRY_URL_JSR) -> str:
    """``{endpoint}/@scope/name/meta.json``"""
    return f"{endpoint.rstrip('/')}/{name}/meta.json"


def version_metadata_url(name: str, version: str, endpoint: str = Constants.REGISTRY_URL_JSR) -> str:
    """``{endpoint}/@scope/name/{version}_meta.json``"""
    return f"{endpoint.rstrip('/')}/{name}/{version}_meta.json"


async def get_jsr_package_metadata(
    name: str,
    fetcher: RobustFetcher,
    endpoint: str = Constants.REGISTRY_URL_JSR,
    cache_first: bool = False,
) -> JsrPackageMetadata:
    """Fetch the version listing of a JSR package.

    Raises:
        NetworkError, AbortError, HTTPError: propagated from the fetcher.
        InvalidMetadataError: the body is not a metadata document.
    """
    url = package_metadata_url(name, endpoint)
    result = await fetcher.fetch(FetchRequest(url=url), cache_first)
    metadata = decode_metadata(url, result.response, JsrPackageMetadata.from_json)
    if is_debug_enabled(logger):
        logger.debug(
            "Fetched package metadata",
            extra=extra_context(
                event="metadata",
                component="client",
                package_manager="jsr",
                target=safe_url(url),
                from_cache=result.from_cache,
                version_count=len(metadata.versions),
            ),
        )
    return metadata


async def get_jsr_package_version_metadata(
    name: str,
    version: str,
    fetcher: RobustFetcher,
    endpoint: str = Constants.REGISTRY_URL_JSR,
    cache_first: bool = False,
) -> JsrPackageVersionMetadata:
    """Fetch the exports/manifest document of one JSR package version.

    Raises:
        NetworkError, AbortError, HTTPError: propagated from the fetcher.
        InvalidMetadataError: the body is not a metadata document.
    """
    url = version_metadata_url(name, version, endpoint)
    result = await fetcher.fetch(FetchRequest(url=url), cache_first)
    return decode_metadata(url, result.response, JsrPackageVersionMetadata.from_json)
