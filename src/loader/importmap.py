"""Import map parsing and specifier resolution.

Follows the WICG import maps algorithm: keys and addresses are normalized
against the map's base URL once, entries are ordered so that the longest
matching prefix wins, and scopes are consulted before top-level imports.
"""

from __future__ import annotations

import json
import logging
import urllib.parse
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from common.errors import ImportMapError
from .resolution import has_scheme

logger = logging.getLogger(__name__)

SpecifierMap = List[Tuple[str, Optional[str]]]
_SPECIAL_SCHEMES = {"ftp", "file", "http", "https", "ws", "wss"}


def _is_special(url: str) -> bool:
    return url.split(":", 1)[0].lower() in _SPECIAL_SCHEMES


@dataclass
class ImportMap:
    """A normalized import map. ``None`` addresses mark blocked entries."""

    imports: SpecifierMap = field(default_factory=list)
    scopes: List[Tuple[str, SpecifierMap]] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.imports or self.scopes)


def parse_url_like(specifier: str, base: str) -> Optional[str]:
    """Resolve ``specifier`` if it is a URL or a ``/``, ``./``, ``../`` path."""
    if specifier.startswith(("/", "./", "../")):
        try:
            return urllib.parse.urljoin(base, specifier)
        except ValueError:
            return None
    if has_scheme(specifier):
        return specifier
    return None


def _normalize_map(raw: Mapping[str, Any], base: str) -> SpecifierMap:
    normalized: Dict[str, Optional[str]] = {}
    for key, value in raw.items():
        if not key:
            logger.warning("Ignoring empty import map key")
            continue
        norm_key = parse_url_like(key, base) or key
        if not isinstance(value, str):
            logger.warning("Invalid address %r for import map key %s", value, key)
            normalized[norm_key] = None
            continue
        address = parse_url_like(value, base)
        if address is None:
            logger.warning("Address %s for import map key %s is not a URL", value, key)
        elif norm_key.endswith("/") and not address.endswith("/"):
            logger.warning("Address %s for prefix key %s must end with '/'", value, key)
            address = None
        normalized[norm_key] = address
    return sorted(normalized.items(), key=lambda item: item[0], reverse=True)


def resolve_import_map(raw: Union[str, Mapping[str, Any]], base_url: str) -> ImportMap:
    """Parse and normalize an import map document against ``base_url``.

    Raises:
        ValueError: the document is not a JSON object with object-valued
            ``imports``/``scopes``.
    """
    data = json.loads(raw) if isinstance(raw, str) else raw
    if not isinstance(data, Mapping):
        raise ValueError("import map must be a JSON object")
    imports = data.get("imports", {})
    scopes = data.get("scopes", {})
    if not isinstance(imports, Mapping) or not isinstance(scopes, Mapping):
        raise ValueError("import map 'imports' and 'scopes' must be objects")

    normalized_scopes = []
    for prefix, scope_map in scopes.items():
        if not isinstance(scope_map, Mapping):
            raise ValueError(f"scope {prefix!r} must map to an object")
        scope_url = urllib.parse.urljoin(base_url, prefix)
        normalized_scopes.append((scope_url, _normalize_map(scope_map, base_url)))
    normalized_scopes.sort(key=lambda item: item[0], reverse=True)
    return ImportMap(imports=_normalize_map(imports, base_url), scopes=normalized_scopes)


def _match(normalized: str, as_url: Optional[str], specifier_map: SpecifierMap) -> Optional[str]:
    for key, address in specifier_map:
        if key == normalized:
            if address is None:
                raise ImportMapError(f"Import of {normalized} is blocked by the import map")
            return address
        if key.endswith("/") and normalized.startswith(key) and (as_url is None or _is_special(as_url)):
            if address is None:
                raise ImportMapError(f"Import of {normalized} is blocked by the import map")
            after_prefix = normalized[len(key):]
            if _is_special(address):
                resolved = urllib.parse.urljoin(address, after_prefix)
            else:
                # npm:/jsr: addresses have no hierarchical path to join against
                resolved = address + after_prefix
            if not resolved.startswith(address):
                raise ImportMapError(f"Import of {normalized} backtracks above its prefix {key}")
            return resolved
    return None


def resolve_module_specifier(
    specifier: str,
    import_map: ImportMap,
    base_url: str,
    referrer: Optional[str] = None,
) -> str:
    """Apply ``import_map`` to ``specifier``.

    Returns the mapped URL, the URL form of a URL-like specifier, or the bare
    specifier unchanged when nothing maps it.

    Raises:
        ImportMapError: the matching entry is blocked or escapes its prefix.
    """
    referrer = referrer or base_url
    as_url = parse_url_like(specifier, referrer)
    normalized = as_url or specifier

    for scope_prefix, scope_imports in import_map.scopes:
        if scope_prefix == referrer or (scope_prefix.endswith("/") and referrer.startswith(scope_prefix)):
            result = _match(normalized, as_url, scope_imports)
            if result is not None:
                return result

    result = _match(normalized, as_url, import_map.imports)
    if result is not None:
        return result
    return normalized
