# main.py

"""Entry point for the gold_watch price monitor."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("gold_watch.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="gold_watch",
        description="Antam gold price monitor with change notifications.",
    )
    parser.add_argument(
        "--url",
        default=None,
        help=f"Page to monitor (default: {Settings.SOURCE_URL}).",
    )
    parser.add_argument(
        "--from-file",
        default=None,
        dest="from_file",
        help="Read markup from a saved HTML file instead of fetching.",
    )
    parser.add_argument(
        "--data-file",
        default=None,
        dest="data_file",
        help="Snapshot JSON path (default: data/last-price.json).",
    )
    parser.add_argument(
        "--webhook-url",
        default=None,
        dest="webhook_url",
        help="Override N8N_WEBHOOK_URL.",
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
        "--dry-run",
        action="store_true",
        default=False,
        dest="dry_run",
        help="Print the webhook payload instead of sending it.",
    )
    parser.add_argument(
        "--force-save",
        action="store_true",
        default=False,
        dest="force_save",
        help="Overwrite an unreadable stored snapshot.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Show INFO logs on the console.",
    )
    return parser


def main() -> None:
    """Parse arguments and run a single monitor cycle."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(verbose=args.verbose)
    logger.info("gold_watch starting, log file: %s", log_file)

    from src.cli.runner import cli_monitor

    try:
        exit_code = asyncio.run(
            cli_monitor(
                url=args.url,
                from_file=args.from_file,
                data_file=args.data_file,
                webhook_url=args.webhook_url,
                output_format=args.output_format,
                dry_run=args.dry_run,
                force_save=args.force_save,
            )
        )
    except Exception:
        logger.critical("Fatal error during monitor run", exc_info=True)
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
