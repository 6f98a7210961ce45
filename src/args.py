"""Argument parsing functionality for remoteload."""

import argparse

from constants import Constants


def _add_common_arguments(parser):
    """Flags shared by every subcommand."""
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='WARNING')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--base-url",
                        dest="BASE_URL",
                        help="URL relative entry specifiers resolve against (default: current directory)",
                        action="store",
                        type=str)
    parser.add_argument("--relay",
                        dest="RELAY",
                        help="HTTP proxy used for hosts outside the direct allow-list",
                        action="store",
                        type=str)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help=f"Per-request timeout in seconds (default: {Constants.REQUEST_TIMEOUT})",
                        action="store",
                        type=int)
    parser.add_argument("--npm-registry",
                        dest="NPM_REGISTRY",
                        help=f"npm registry endpoint (default: {Constants.REGISTRY_URL_NPM})",
                        action="store",
                        type=str)
    parser.add_argument("--jsr-registry",
                        dest="JSR_REGISTRY",
                        help=f"JSR registry endpoint (default: {Constants.REGISTRY_URL_JSR})",
                        action="store",
                        type=str)
    parser.add_argument("--reload",
                        dest="RELOAD",
                        help="Go to the network before the response store",
                        action="store_true")


def build_parser():
    """Build the top-level parser with its subcommands."""
    parser = argparse.ArgumentParser(
        prog="remoteload",
        description="Resolve and load remote JavaScript/TypeScript modules for bundling",
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="COMMAND", metavar="COMMAND")
    subparsers.required = True

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve a specifier to the URL a bundler would load",
    )
    resolve_parser.add_argument("SPECIFIER",
                                help="npm:/jsr: specifier, URL, relative path or bare name",
                                type=str)
    resolve_parser.add_argument("--importer",
                                dest="IMPORTER",
                                help="URL of the importing module",
                                action="store",
                                type=str)
    resolve_parser.add_argument("--import-map",
                                dest="IMPORT_MAP",
                                help="Import map URL or path, relative to the base URL",
                                action="store",
                                type=str)
    resolve_parser.add_argument("-e", "--external",
                                dest="EXTERNAL",
                                help="Leave matching specifiers to the host (may be repeated, * wildcards)",
                                action="append",
                                type=str,
                                default=[])
    _add_common_arguments(resolve_parser)

    load_parser = subparsers.add_parser(
        "load",
        help="Load a URL and report its content kind",
    )
    load_parser.add_argument("URL",
                             help="URL or path to load",
                             type=str)
    load_parser.add_argument("-o", "--output",
                             dest="OUTPUT",
                             help="Write the loaded contents to this file",
                             action="store",
                             type=str)
    _add_common_arguments(load_parser)

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
