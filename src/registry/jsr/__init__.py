"""JSR registry access."""

from .client import (
    get_jsr_package_metadata,
    get_jsr_package_version_metadata,
    package_metadata_url,
    version_metadata_url,
)

__all__ = [
    "get_jsr_package_metadata",
    "get_jsr_package_version_metadata",
    "package_metadata_url",
    "version_metadata_url",
]
