"""NPM registry access."""

from .client import get_npm_package_metadata, package_metadata_url

__all__ = ["get_npm_package_metadata", "package_metadata_url"]
