"""Unified CLI entry-point for the test controller tools.

Usage::

    testctl extract [-o FILE] [-l LEVEL] [-i CATEGORY] [-e CATEGORY] BINARY...
    testctl plugins list --config controller.yaml
    testctl plugins run --config controller.yaml

Exit codes: ``0`` on success, ``-1`` when the arguments cannot be parsed and
``-2`` when processing fails (the error goes to stderr).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from testctl.config import DEFAULT_CONFIG_FILE, load_controller_config
from testctl.extractor.catalog import run_extraction
from testctl.extractor.types import ExtractOptions, Level, parse_level
from testctl.plugins.base import ReaderPlugin
from testctl.plugins.loader import get_plugin

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = -1
EXIT_FAILURE = -2


class CommandFailed(Exception):
    """Raised by a handler when a step reports failure without raising."""


def _level_arg(value: str) -> Level:
    try:
        return parse_level(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


# ---------------------------------------------------------------------------
# Extract sub-command handler
# ---------------------------------------------------------------------------

def _cmd_extract(args: argparse.Namespace) -> None:
    options = ExtractOptions(
        level=args.level,
        include_category=args.include,
        exclude_category=args.exclude,
        output=Path(args.output) if args.output else None,
    )
    run_extraction(args.binaries, options, stream=sys.stdout)


# ---------------------------------------------------------------------------
# Plugins sub-command handlers
# ---------------------------------------------------------------------------

def _cmd_plugins_list(args: argparse.Namespace) -> None:
    cfg = load_controller_config(args.config)
    for descriptor in cfg.plugins:
        plugin = get_plugin(descriptor, cfg.path)
        print(f"  {plugin.name:25s}  {plugin.plugin_type.value:15s}  {descriptor.path}")
    print(f"\n{len(cfg.plugins)} plugin(s)")


def _cmd_plugins_run(args: argparse.Namespace) -> None:
    cfg = load_controller_config(args.config)
    for descriptor in cfg.plugins:
        plugin = get_plugin(descriptor, cfg.path)
        if not plugin.execute():
            raise CommandFailed(f"Plugin {plugin.name} reported failure")
        if isinstance(plugin, ReaderPlugin):
            for record in plugin.tests:
                print(f'"{record.origin}" | {record.identifier}')


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="testctl", description="Test controller tools")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # -- extract -------------------------------------------------------------
    p = sub.add_parser("extract", help="List the tests in test binaries")
    p.add_argument("-o", "--output", default=None,
                   help="Append the catalog to this file (default: stdout)")
    p.add_argument("-l", "--level", type=_level_arg, default=Level.FUNCTION,
                   help="namespace | class | function | testcase (default: function)")
    p.add_argument("-i", "--include", default=None, help="Only tests in this category")
    p.add_argument("-e", "--exclude", default=None, help="Skip tests in this category")
    p.add_argument("binaries", nargs="+", metavar="BINARY",
                   help="Test module, package directory or archive")

    # -- plugins -------------------------------------------------------------
    plugins = sub.add_parser("plugins", help="Controller plugins")
    plugins_sub = plugins.add_subparsers(dest="plugins_cmd")

    for name, help_text in (
        ("list", "Load every configured plugin and show it"),
        ("run", "Load and execute every configured plugin"),
    ):
        p = plugins_sub.add_parser(name, help=help_text)
        p.add_argument("-c", "--config", default=DEFAULT_CONFIG_FILE,
                       help=f"Controller configuration (default: {DEFAULT_CONFIG_FILE})")

    return parser


def _resolve_handler(args: argparse.Namespace):
    if args.command == "extract":
        return _cmd_extract
    if args.command == "plugins":
        return {"list": _cmd_plugins_list, "run": _cmd_plugins_run}.get(args.plugins_cmd or "")
    return None


def main(argv: list[str] | None = None) -> int:
    """CLI entry-point; returns the process exit code."""
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # argparse exits 0 for --help and 2 for usage errors
        return EXIT_OK if exc.code in (0, None) else EXIT_USAGE

    handler = _resolve_handler(args)
    if handler is None:
        parser.print_help(sys.stderr)
        return EXIT_USAGE

    _setup_logging(args.verbose)
    try:
        handler(args)
    except Exception as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"Failed to process: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK


def run() -> None:
    """Console-script wrapper around :func:`main`."""
    sys.exit(main())


if __name__ == "__main__":
    run()
