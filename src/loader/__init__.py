"""Remote module loader package.

Resolves ``npm:``/``jsr:`` specifiers, import-map entries and relative imports
to URLs, and loads their contents for a bundling engine through resolve/load
hooks.
"""

from .config import LoaderConfig
from .content_kind import response_to_loader
from .importmap import ImportMap, resolve_import_map, resolve_module_specifier
from .resolution import Resolution, resolution_to_url, url_to_resolution
from .sourcemap import extract_source_map_url, inline_source_map
from .plugin import (
    LoadEvent,
    Message,
    OnLoadArgs,
    OnLoadResult,
    OnResolveArgs,
    OnResolveResult,
    OnStartResult,
    PluginBuild,
    RemoteLoader,
    Source,
)

__all__ = [
    "LoaderConfig",
    "response_to_loader",
    "ImportMap",
    "resolve_import_map",
    "resolve_module_specifier",
    "Resolution",
    "resolution_to_url",
    "url_to_resolution",
    "extract_source_map_url",
    "inline_source_map",
    "LoadEvent",
    "Message",
    "OnLoadArgs",
    "OnLoadResult",
    "OnResolveArgs",
    "OnResolveResult",
    "OnStartResult",
    "PluginBuild",
    "RemoteLoader",
    "Source",
]
