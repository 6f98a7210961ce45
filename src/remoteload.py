"""remoteload - resolve and load remote modules for JavaScript/TypeScript bundling.

    Returns:
        int: Exit code
"""
import asyncio
import logging
import os
import sys

import yaml

from constants import Constants, ExitCodes
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_resolve import run_load, run_resolve
from loader.config import LoaderConfig

logger = logging.getLogger(__name__)

COMMANDS = {
    "resolve": run_resolve,
    "load": run_load,
}


def _setup_logging(args):
    """Configure logging based on CLI arguments."""
    # Honor CLI --loglevel by passing it to centralized logger via env
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging()

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.COMMAND),
        )

    try:
        config = LoaderConfig.from_args(args)
    except FileNotFoundError as e:
        logging.error("Config file not found: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    except (ValueError, TypeError, yaml.YAMLError) as e:
        logging.error("Invalid config file: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    code = asyncio.run(COMMANDS[args.COMMAND](args, config))
    sys.exit(code.value)


if __name__ == "__main__":
    main()
