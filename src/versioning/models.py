"""Data models for package specifiers and registry metadata."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import semantic_version

from constants import Registry


@dataclass(frozen=True)
class PackageSpecifier:
    """A parsed ``npm:`` or ``jsr:`` specifier."""
    registry: Registry
    name: str
    range: semantic_version.NpmSpec
    entry_point: str = "."  # "." or "./<subpath>"
    tag: Optional[str] = None  # raw version tag as written


@dataclass
class NpmPackageMetadata:
    """Abbreviated npm package document (``GET {registry}/{name}``)."""
    name: str
    dist_tags: Dict[str, str]
    versions: Dict[str, Dict[str, Any]]
    modified: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "NpmPackageMetadata":
        """Build from the registry JSON document."""
        return cls(
            name=data.get("name", ""),
            dist_tags=dict(data.get("dist-tags") or {}),
            versions=dict(data.get("versions") or {}),
            modified=data.get("modified"),
        )


@dataclass
class JsrPackageMetadata:
    """JSR ``meta.json`` document. Yank flags are kept but not used for resolution."""
    scope: str
    name: str
    versions: Dict[str, Dict[str, Any]]
    latest: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "JsrPackageMetadata":
        """Build from the registry JSON document."""
        return cls(
            scope=data.get("scope", ""),
            name=data.get("name", ""),
            versions=dict(data.get("versions") or {}),
            latest=data.get("latest"),
        )

    def is_yanked(self, version: str) -> bool:
        """True when ``version`` carries the yank flag."""
        return bool(self.versions.get(version, {}).get("yanked"))


@dataclass
class JsrPackageVersionMetadata:
    """JSR ``{version}_meta.json`` document."""
    exports: Dict[str, str]
    manifest: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "JsrPackageVersionMetadata":
        """Build from the registry JSON document."""
        return cls(
            exports=dict(data.get("exports") or {}),
            manifest=dict(data.get("manifest") or {}),
        )
