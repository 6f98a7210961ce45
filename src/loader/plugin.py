"""Resolve/load hooks the bundling engine calls into.

The engine registers :class:`RemoteLoader` through :meth:`RemoteLoader.setup`
(or calls the hook coroutines directly). Failures of individual modules are
reported as error messages on the hook results so the rest of the build can
proceed; only unexpected exceptions escape.
"""

from __future__ import annotations

import logging
import re
import urllib.parse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Union

from constants import Constants, ContentKind
from common.errors import FetchError, RemoteLoadError
from common.http_client import RobustFetcher
from common.http_models import FetchRequest
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from versioning.cache import ResolvedVersions
from versioning.resolvers import resolve_specifier
from .config import LoaderConfig
from .content_kind import response_to_loader
from .importmap import ImportMap, resolve_import_map, resolve_module_specifier
from .resolution import has_scheme, is_bare_module_name, resolution_to_url, url_to_resolution
from .sourcemap import inline_source_map

logger = logging.getLogger(__name__)


@dataclass
class Message:
    """Error or warning reported to the engine."""

    text: str
    location: Optional[Dict[str, Any]] = None
    notes: List[Dict[str, Any]] = field(default_factory=list)
    detail: Optional[Exception] = None


@dataclass
class OnStartResult:
    """Outcome of the build-start hook."""

    errors: List[Message] = field(default_factory=list)
    warnings: List[Message] = field(default_factory=list)


@dataclass
class OnResolveArgs:
    """What the engine knows about an import it needs resolved."""

    path: str
    importer: str = ""
    namespace: str = "file"
    resolve_dir: str = ""
    kind: str = "import-statement"


@dataclass
class OnResolveResult:
    """A location for the engine, or the errors that prevented one."""

    path: str = ""
    namespace: str = ""
    external: bool = False
    errors: List[Message] = field(default_factory=list)
    warnings: List[Message] = field(default_factory=list)


@dataclass
class OnLoadArgs:
    """A location the engine wants the contents of."""

    path: str
    namespace: str


@dataclass
class OnLoadResult:
    """Module contents and kind, or the errors that prevented loading."""

    contents: bytes = b""
    loader: Optional[str] = None
    errors: List[Message] = field(default_factory=list)
    warnings: List[Message] = field(default_factory=list)


@dataclass
class Source:
    """In-memory module served without a network round-trip."""

    path: str  # absolute URL
    contents: Union[str, bytes]
    loader: ContentKind = ContentKind.TS


@dataclass
class LoadEvent:
    """Progress notification emitted after each load."""

    path: str
    size: int
    loader: str
    from_cache: bool


StartCallback = Callable[[], Awaitable[OnStartResult]]
ResolveCallback = Callable[[OnResolveArgs], Awaitable[OnResolveResult]]
LoadCallback = Callable[[OnLoadArgs], Awaitable[OnLoadResult]]


class PluginBuild(Protocol):
    """Hook registration surface offered by the bundling engine."""

    def on_start(self, callback: StartCallback) -> None:
        """Register a callback run once before resolution starts."""

    def on_resolve(self, filter: str, namespace: Optional[str], callback: ResolveCallback) -> None:  # pylint: disable=redefined-builtin
        """Register a resolve callback for paths matching ``filter``."""

    def on_load(self, filter: str, namespace: Optional[str], callback: LoadCallback) -> None:  # pylint: disable=redefined-builtin
        """Register a load callback for paths matching ``filter`` in ``namespace``."""


def compile_patterns(patterns: Iterable[str], base_url: str) -> List[re.Pattern]:
    """Compile ``*`` glob patterns; non-bare entries are resolved against ``base_url``."""
    compiled = []
    for pattern in patterns:
        if not is_bare_module_name(pattern):
            pattern = urllib.parse.urljoin(base_url, pattern)
        compiled.append(re.compile("^" + ".*".join(re.escape(p) for p in pattern.split("*")) + "$"))
    return compiled


def is_package_specifier(specifier: str) -> bool:
    """True for ``npm:`` and ``jsr:`` specifiers."""
    return specifier.split(":", 1)[0].lower() in Constants.PACKAGE_PROTOCOLS and ":" in specifier


class RemoteLoader:
    """Resolves specifiers to URLs and loads their contents for one build."""

    name = "remote-loader"

    def __init__(
        self,
        config: LoaderConfig,
        fetcher: RobustFetcher,
        resolved_versions: Optional[ResolvedVersions] = None,
        sources: Iterable[Source] = (),
        on_progress: Optional[Callable[[LoadEvent], None]] = None,
        import_map: Optional[Mapping[str, Any]] = None,
    ):
        """Initialize the loader.

        Args:
            config: Build configuration.
            fetcher: Robust fetcher shared by every hook call.
            resolved_versions: Build-scoped version memo; None disables it.
            sources: Modules served from memory, keyed by URL.
            on_progress: Called with a LoadEvent after each load.
            import_map: Inline import map, resolved against ``config.base_url``.
        """
        self.config = config
        self.fetcher = fetcher
        self.resolved_versions = resolved_versions
        self._sources = {source.path: source for source in sources}
        self._on_progress = on_progress
        self._import_map = resolve_import_map(import_map, config.base_url) if import_map else ImportMap()
        self._import_map_loaded = False
        self._externals = compile_patterns(config.external, config.base_url)
        self._reload = (
            compile_patterns(config.reload, config.base_url)
            if isinstance(config.reload, list)
            else config.reload
        )

    @property
    def import_map(self) -> ImportMap:
        """The import map currently in effect."""
        return self._import_map

    def setup(self, build: PluginBuild) -> None:
        """Register the hooks with the engine."""
        build.on_start(self.on_start)
        build.on_resolve(".*", None, self.on_resolve)
        for namespace in [*Constants.LOADABLE_NAMESPACES, *Constants.RESERVED_NAMESPACES]:
            build.on_load(".*", namespace, self.on_load)

    def cache_first(self, url: str) -> bool:
        """Whether ``url`` should be served from the store before the network."""
        if isinstance(self._reload, bool):
            return not self._reload
        return not any(pattern.match(url) for pattern in self._reload)

    def is_external(self, path: str) -> bool:
        """Whether ``path`` matches an external pattern."""
        return any(pattern.match(path) for pattern in self._externals)

    async def on_start(self) -> OnStartResult:
        """Load the configured import map, once per build."""
        if not self.config.import_map_url or self._import_map_loaded:
            return OnStartResult()
        self._import_map_loaded = True
        url = urllib.parse.urljoin(self.config.base_url, self.config.import_map_url)
        location = url_to_resolution(url)
        self._import_map = ImportMap()
        loaded = await self.on_load(OnLoadArgs(path=location.path, namespace=location.namespace))
        if loaded.errors:
            return OnStartResult(errors=loaded.errors)
        try:
            self._import_map = resolve_import_map(loaded.contents.decode("utf-8"), url)
        except (UnicodeDecodeError, ValueError) as exc:
            return OnStartResult(errors=[Message(text=f"Invalid import map {url}: {exc}", detail=exc)])
        logger.info("Loaded import map %s", safe_url(url))
        return OnStartResult(warnings=loaded.warnings)

    def _referrer(self, args: OnResolveArgs) -> str:
        if args.importer and args.importer != Constants.STDIN_IMPORTER:
            return resolution_to_url(args.namespace or "file", args.importer)
        if args.resolve_dir:
            return Path(args.resolve_dir).absolute().as_uri().rstrip("/") + "/"
        return self.config.base_url

    async def _resolve_package(self, specifier: str) -> str:
        return await resolve_specifier(
            specifier,
            self.fetcher,
            self.resolved_versions,
            cache_first=self.cache_first(specifier),
            npm_registry=self.config.npm_registry,
            npm_cdn=self.config.npm_cdn,
            jsr_registry=self.config.jsr_registry,
        )

    async def on_resolve(self, args: OnResolveArgs) -> OnResolveResult:
        """Resolve an import to a namespaced location, or mark it external."""
        try:
            specifier = args.path
            if is_package_specifier(specifier):
                if self.is_external(specifier):
                    return OnResolveResult(path=specifier, external=True)
                url = await self._resolve_package(specifier)
            else:
                referrer = self._referrer(args)
                if not is_bare_module_name(specifier):
                    joined = urllib.parse.urljoin(referrer, specifier)
                    if not has_scheme(joined):
                        return OnResolveResult(
                            errors=[Message(text=f"Cannot resolve {specifier} relative to {referrer}")]
                        )
                    specifier = joined
                mapped = resolve_module_specifier(specifier, self._import_map, self.config.base_url, referrer)
                if self.is_external(mapped) or is_bare_module_name(mapped):
                    logger.debug("Leaving %s external", mapped)
                    return OnResolveResult(path=mapped, external=True)
                if is_package_specifier(mapped):
                    url = await self._resolve_package(mapped)
                else:
                    url = mapped
        except RemoteLoadError as exc:
            logger.debug("Resolution of %s failed: %s", args.path, exc)
            return OnResolveResult(errors=[Message(text=str(exc), detail=exc)])

        if self.is_external(url):
            return OnResolveResult(path=url, external=True)
        location = url_to_resolution(url)
        if is_debug_enabled(logger):
            logger.debug(
                "Resolved",
                extra=extra_context(
                    event="resolve",
                    component="remote_loader",
                    specifier=args.path,
                    target=safe_url(url),
                ),
            )
        return OnResolveResult(path=location.path, namespace=location.namespace)

    async def on_load(self, args: OnLoadArgs) -> OnLoadResult:
        """Load a location's bytes and content kind."""
        if args.namespace not in Constants.LOADABLE_NAMESPACES:
            return OnLoadResult(
                errors=[Message(text=f"Loading {args.namespace}: modules is not supported yet")]
            )
        url = resolution_to_url(args.namespace, args.path)

        source = self._sources.get(url)
        if source is not None:
            contents = source.contents.encode("utf-8") if isinstance(source.contents, str) else source.contents
            self._emit(url, len(contents), source.loader.value, True)
            return OnLoadResult(contents=contents, loader=source.loader.value)

        cache_first = self.cache_first(url)
        try:
            result = await self.fetcher.fetch(FetchRequest(url=url), cache_first)
        except FetchError as exc:
            logger.warning("Failed to load %s: %s", safe_url(url), exc)
            return OnLoadResult(errors=[Message(text=f"Failed to load {url}: {exc}", detail=exc)])

        response = result.response
        final_url = response.url or url
        kind = response_to_loader(final_url, response.content_type)
        contents = response.body
        warnings: List[Message] = []
        if kind.value in Constants.SOURCE_MAP_KINDS:
            contents, warnings = await self._inline_source_map(contents, final_url, cache_first)

        self._emit(url, len(contents), kind.value, result.from_cache)
        return OnLoadResult(contents=contents, loader=kind.value, warnings=warnings)

    async def _inline_source_map(self, contents: bytes, base: str, cache_first: bool):
        try:
            text = contents.decode("utf-8")
        except UnicodeDecodeError:
            return contents, []
        rewritten, problems = await inline_source_map(text, base, self.fetcher, cache_first)
        warnings = [Message(text=problem) for problem in problems]
        if rewritten is text:
            return contents, warnings
        return rewritten.encode("utf-8"), warnings

    def _emit(self, path: str, size: int, loader: str, from_cache: bool) -> None:
        logger.debug("Loaded %s (%s, %d bytes, cache=%s)", safe_url(path), loader, size, from_cache)
        if self._on_progress is not None:
            self._on_progress(LoadEvent(path=path, size=size, loader=loader, from_cache=from_cache))
