"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    RESOLUTION_ERROR = 3


class Registry(Enum):
    """Package registries a specifier can point at.

    Args:
        Enum (string): URL scheme of the registry protocol.
    """

    NPM = "npm"
    JSR = "jsr"


class ContentKind(Enum):
    """Content kinds understood by the bundling engine.

    Args:
        Enum (string): Loader name as the engine spells it.
    """

    BASE64 = "base64"
    BINARY = "binary"
    COPY = "copy"
    CSS = "css"
    DATAURL = "dataurl"
    DEFAULT = "default"
    EMPTY = "empty"
    FILE = "file"
    JS = "js"
    JSON = "json"
    JSX = "jsx"
    LOCAL_CSS = "local-css"
    TEXT = "text"
    TS = "ts"
    TSX = "tsx"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REGISTRY_URL_NPM = "https://registry.npmjs.org"
    REGISTRY_URL_JSR = "https://jsr.io"
    CDN_URL_NPM = "https://esm.sh"
    NPM_METADATA_ACCEPT = (
        "application/vnd.npm.install-v1+json; q=1.0, application/json; q=0.8, */*"
    )

    PACKAGE_PROTOCOLS = [Registry.NPM.value, Registry.JSR.value]
    LOADABLE_NAMESPACES = ["file", "http", "https", "data"]
    RESERVED_NAMESPACES = ["npm", "jsr", "node"]
    SOURCE_MAP_KINDS = ["js", "jsx", "ts", "tsx", "css"]
    STDIN_IMPORTER = "<stdin>"

    # Hosts reachable without the relay transport; "*." entries match subdomains.
    DIRECT_HOSTS = [
        "i.gyazo.com",
        "t.gyazo.com",
        "scrapbox.io",
        "api.openai.com",
        "*.openai.azure.com",
        "maps.googleapis.com",
        "upload.gyazo.com",
        "storage.googleapis.com",
        "sentry.io",
    ]

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "REMOTELOAD_LOG_LEVEL"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    USER_AGENT = "remoteload/0.1"

    AVAILABLE_VERSIONS_SHOWN = 10
    RESPONSE_CACHE_TTL_SEC = 7 * 24 * 3600
    RESPONSE_CACHE_MAX_ENTRIES = 2000
    RESPONSE_CACHE_MAX_BYTES = 200 * 1024 * 1024
