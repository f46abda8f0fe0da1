"""CLI entry point."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Iterable
from typing import Optional, Sequence

from regnet import __version__
from regnet.config import load_settings
from regnet.errors import RegnetError
from regnet.logging_utils import (
    DEFAULT_LOGGER_NAME,
    configure_logging,
    log_exception,
    run_with_error_handling,
)
from regnet.merge import run_group_union
from regnet.pipeline import BatchReport, run_netprop

_SUBCOMMANDS: Sequence[str] = ("help", "netprop", "union")


def _report_outcome(report: BatchReport, label: str) -> None:
    logger = logging.getLogger(DEFAULT_LOGGER_NAME)
    if report.ok:
        logger.info("%s: %d item(s) done.", label, len(report.outputs))
        return
    failed = ", ".join(item for item, _ in report.failures)
    raise RegnetError(
        f"{label}: {len(report.failures)} item(s) failed: {failed}",
        context={"failed": [item for item, _ in report.failures]},
    )


def _netprop_handler(args: argparse.Namespace) -> None:
    settings = load_settings(args.config, args.overrides)
    _report_outcome(run_netprop(settings), "netprop")


def _union_handler(args: argparse.Namespace) -> None:
    settings = load_settings(args.config, args.overrides)
    _report_outcome(run_group_union(settings), "union")


def _add_settings_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="YAML settings file.",
    )
    parser.add_argument(
        "overrides",
        nargs="*",
        default=[],
        help="Setting overrides (key=value).",
    )


def _register_help_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    parser: argparse.ArgumentParser,
) -> None:
    def _handler(_args: argparse.Namespace) -> None:
        parser.print_help()

    help_parser = subparsers.add_parser(
        "help",
        help="Show top-level help.",
        description="Show top-level help.",
    )
    help_parser.set_defaults(handler=_handler)


def _register_netprop_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    netprop_parser = subparsers.add_parser(
        "netprop",
        help="Compute network properties.",
        description=(
            "Compute node and network properties (degree, betweenness, clustering, "
            "shortest paths, p-step kernel, Tanimoto) of network_file or of every "
            "file in network_dir."
        ),
    )
    _add_settings_arguments(netprop_parser)
    netprop_parser.set_defaults(handler=_netprop_handler)


def _register_union_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    union_parser = subparsers.add_parser(
        "union",
        help="Merge groups of networks.",
        description=(
            "Group the files of network_dir (by network_group_file if given) and "
            "write the union network of each group."
        ),
    )
    _add_settings_arguments(union_parser)
    union_parser.set_defaults(handler=_union_handler)


def _build_parser(subcommands: Iterable[str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="regnet",
        description="regnet command line interface.",
    )
    parser.add_argument(
        "--traceback",
        action="store_true",
        help="Show full traceback on errors.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"regnet {__version__}",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    for name in subcommands:
        if name == "help":
            _register_help_subcommand(subparsers, parser)
        elif name == "netprop":
            _register_netprop_subcommand(subparsers)
        elif name == "union":
            _register_union_subcommand(subparsers)
        else:
            raise ValueError(f"Unknown subcommand: {name!r}")
    return parser


def _cli_main(
    *,
    cli_logger: logging.Logger,
    argv: Optional[Sequence[str]] = None,
) -> None:
    parser = _build_parser(_SUBCOMMANDS)
    args = parser.parse_args(argv)
    if args.verbose:
        cli_logger.setLevel(logging.DEBUG)
    if not getattr(args, "command", None):
        parser.print_help()
        raise SystemExit(2)
    try:
        args.handler(args)
    except RegnetError as exc:
        log_exception(cli_logger, exc, show_traceback=args.traceback)
        raise SystemExit(1) from None


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point with standard logging/error handling."""
    logger = configure_logging()
    run_with_error_handling(_cli_main, logger=logger, cli_logger=logger, argv=argv)


if __name__ == "__main__":
    main()
