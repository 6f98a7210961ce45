"""Handlers for the ``resolve`` and ``load`` subcommands."""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any, List, Tuple

from constants import ExitCodes
from common.errors import FetchError
from common.http_client import RobustFetcher
from common.response_store import MemoryResponseStore
from loader.config import LoaderConfig
from loader.plugin import LoadEvent, Message, OnLoadArgs, OnResolveArgs, RemoteLoader
from loader.resolution import resolution_to_url, url_to_resolution
from versioning.cache import ResolvedVersions

logger = logging.getLogger(__name__)


def exit_code_for(errors: List[Message]) -> ExitCodes:
    """Map hook errors to a process exit code."""
    if not errors:
        return ExitCodes.SUCCESS
    if any(isinstance(message.detail, FetchError) for message in errors):
        return ExitCodes.CONNECTION_ERROR
    return ExitCodes.RESOLUTION_ERROR


def build_loader(config: LoaderConfig, events: List[LoadEvent]) -> Tuple[RobustFetcher, RemoteLoader]:
    """Wire a fetcher, response store and loader from ``config``."""
    fetcher = RobustFetcher(
        store=MemoryResponseStore(default_ttl=config.cache_ttl),
        relay_url=config.relay_url,
        allowed_hosts=config.allowed_hosts,
        timeout=config.timeout,
    )
    loader = RemoteLoader(
        config,
        fetcher,
        resolved_versions=ResolvedVersions(),
        on_progress=events.append,
    )
    return fetcher, loader


def _report(errors: List[Message], warnings: List[Message]) -> None:
    for warning in warnings:
        logger.warning(warning.text)
    for error in errors:
        logger.error(error.text)


async def run_resolve(args: Any, config: LoaderConfig) -> ExitCodes:
    """Resolve ``args.SPECIFIER`` and print the URL, or ``external:`` plus the path."""
    events: List[LoadEvent] = []
    fetcher, loader = build_loader(config, events)
    async with fetcher:
        started = await loader.on_start()
        if started.errors:
            _report(started.errors, started.warnings)
            return exit_code_for(started.errors)

        importer = getattr(args, "IMPORTER", None)
        resolve_args = OnResolveArgs(path=args.SPECIFIER)
        if importer:
            location = url_to_resolution(urllib.parse.urljoin(config.base_url, importer))
            resolve_args.importer = location.path
            resolve_args.namespace = location.namespace
        result = await loader.on_resolve(resolve_args)

    _report(result.errors, result.warnings)
    if result.errors:
        return exit_code_for(result.errors)
    if result.external:
        print(f"external:{result.path}")
    else:
        print(resolution_to_url(result.namespace, result.path))
    return ExitCodes.SUCCESS


async def run_load(args: Any, config: LoaderConfig) -> ExitCodes:
    """Load ``args.URL``, print its kind, size and origin, optionally saving it."""
    events: List[LoadEvent] = []
    fetcher, loader = build_loader(config, events)
    url = urllib.parse.urljoin(config.base_url, args.URL)
    location = url_to_resolution(url)
    async with fetcher:
        result = await loader.on_load(OnLoadArgs(path=location.path, namespace=location.namespace))

    _report(result.errors, result.warnings)
    if result.errors:
        return exit_code_for(result.errors)

    output = getattr(args, "OUTPUT", None)
    if output:
        try:
            with open(output, "wb") as f:
                f.write(result.contents)
        except OSError as e:
            logger.error("Could not write %s: %s", output, e)
            return ExitCodes.FILE_ERROR

    origin = "cache" if events and events[-1].from_cache else "network"
    print(f"{result.loader}\t{len(result.contents)} bytes\t{origin}")
    return ExitCodes.SUCCESS
