# main.py

"""Entry point for the price_watch client (TUI or headless CLI)."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging

logger = logging.getLogger("price_watch.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="price_watch",
        description="Search a product catalog and manage price-tracked items.",
        epilog=(
            "Endpoints are read from SEARCH_URL, TRACK_ADD_URL, "
            "TRACK_LIST_URL and TRACK_REMOVE_URL (.env supported)."
        ),
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Search query, or product name with --track. "
        "Omit to launch the interactive TUI.",
    )
    parser.add_argument(
        "-t",
        "--track",
        action="store_true",
        default=False,
        help="Track QUERY as a product instead of searching for it.",
    )
    parser.add_argument(
        "-p",
        "--target-price",
        default=None,
        dest="target_price",
        help="Target price for --track.",
    )
    parser.add_argument(
        "-l",
        "--list",
        action="store_true",
        default=False,
        dest="list_tracked",
        help="List tracked items.",
    )
    parser.add_argument(
        "-r",
        "--remove",
        type=int,
        default=None,
        metavar="ID",
        help="Remove the tracked item with this id.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Run a connectivity health check on all endpoints.",
    )
    return parser


def _check_args(
    parser: argparse.ArgumentParser, args: argparse.Namespace,
) -> None:
    """Reject flag combinations that would otherwise be ignored."""
    if args.list_tracked and args.remove is not None:
        parser.error("--list and --remove cannot be combined")
    if args.list_tracked or args.remove is not None:
        if args.query is not None:
            parser.error("a query cannot be combined with --list or --remove")
        if args.track:
            parser.error("--track cannot be combined with --list or --remove")
    if args.track and args.query is None:
        parser.error("--track needs a product name")
    if args.target_price is not None and not args.track:
        parser.error("--target-price is only valid with --track")


def _run_tui() -> None:
    """Launch the interactive Textual TUI."""
    from src.ui.app import PriceWatchApp

    try:
        app = PriceWatchApp()
        app.run()
    except Exception:
        logger.critical("Fatal error during TUI run", exc_info=True)
        raise
    finally:
        logger.info("price_watch TUI shutting down")


def _run_cli(args: argparse.Namespace) -> None:
    """Run one headless operation and exit with its status."""
    from src.cli import runner

    if args.remove is not None:
        coro = runner.cli_remove(args.remove, args.output_format)
    elif args.list_tracked:
        coro = runner.cli_list(args.output_format)
    elif args.track:
        coro = runner.cli_track(
            args.query or "", args.target_price, args.output_format
        )
    else:
        coro = runner.cli_search(args.query, args.output_format)

    sys.exit(asyncio.run(coro))


def _run_health_check() -> None:
    """Run endpoint connectivity health check."""
    from src.cli.runner import run_health_check

    exit_code = asyncio.run(run_health_check())
    sys.exit(exit_code)


def main() -> None:
    """Route to the TUI (no arguments) or a headless operation."""
    log_file = setup_logging()
    logger.info("price_watch starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    if args.health:
        _run_health_check()
        return

    _check_args(parser, args)
    if (
        args.query is None
        and not args.list_tracked
        and args.remove is None
    ):
        _run_tui()
    else:
        _run_cli(args)


if __name__ == "__main__":
    main()
