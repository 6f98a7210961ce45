"""Configuration for the remote loader."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from constants import Constants

logger = logging.getLogger(__name__)


@dataclass
class LoaderConfig:
    """Build-wide settings for resolution and loading."""

    base_url: str = "file:///"
    import_map_url: Optional[str] = None
    external: List[str] = field(default_factory=list)
    # False: cache first everywhere; True: network first everywhere;
    # list: network first only for URLs matching one of the glob patterns.
    reload: Union[bool, List[str]] = False
    relay_url: Optional[str] = None
    allowed_hosts: List[str] = field(default_factory=lambda: list(Constants.DIRECT_HOSTS))
    npm_registry: str = Constants.REGISTRY_URL_NPM
    npm_cdn: str = Constants.CDN_URL_NPM
    jsr_registry: str = Constants.REGISTRY_URL_JSR
    timeout: int = Constants.REQUEST_TIMEOUT
    cache_ttl: int = Constants.RESPONSE_CACHE_TTL_SEC

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoaderConfig":
        """Create config from a mapping, ignoring unknown keys.

        Args:
            data: Mapping such as the ``loader`` section of a YAML file.

        Returns:
            LoaderConfig instance.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_file(cls, path: str) -> "LoaderConfig":
        """Load config from a YAML or JSON file.

        A top-level ``loader`` section is used when present.

        Raises:
            FileNotFoundError: the file does not exist.
            ValueError: the file does not hold a mapping.
        """
        with open(path, "r", encoding="utf-8") as f:
            if path.endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return cls.from_dict(data.get("loader", data))

    @classmethod
    def from_args(cls, args: Any) -> "LoaderConfig":
        """Create config from CLI arguments.

        Values from ``--config`` are loaded first; explicit CLI options win.

        Args:
            args: Parsed CLI arguments namespace.

        Returns:
            LoaderConfig instance.
        """
        config_path = getattr(args, "CONFIG", None)
        config = cls.from_file(config_path) if config_path else cls()

        base_url = getattr(args, "BASE_URL", None)
        if base_url:
            config.base_url = base_url
        else:
            config.base_url = config.base_url if config_path else _cwd_url()
        if getattr(args, "IMPORT_MAP", None):
            config.import_map_url = args.IMPORT_MAP
        if getattr(args, "EXTERNAL", None):
            config.external = [*config.external, *args.EXTERNAL]
        if getattr(args, "RELOAD", None):
            config.reload = True
        if getattr(args, "RELAY", None):
            config.relay_url = args.RELAY
        if getattr(args, "TIMEOUT", None) is not None:
            config.timeout = int(args.TIMEOUT)
        if getattr(args, "NPM_REGISTRY", None):
            config.npm_registry = args.NPM_REGISTRY
        if getattr(args, "JSR_REGISTRY", None):
            config.jsr_registry = args.JSR_REGISTRY
        return config


def _cwd_url() -> str:
    """``file:`` URL of the working directory, with a trailing slash."""
    return Path.cwd().as_uri().rstrip("/") + "/"
