"""CLI entrypoint for the DogWatcher agent."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from dogwatcher.config import load_config, load_sites
from dogwatcher.notifications import build_notifier
from dogwatcher.runner import DogWatcherRunner
from dogwatcher.scraper import PlaywrightObserver
from dogwatcher.store import SnapshotStore, resolve_data_dir

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DogWatcher adoption listing monitor")
    parser.add_argument(
        "--run",
        action="store_true",
        help="execute one monitoring cycle over every configured site",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="scrape and diff without saving snapshots or sending notifications",
    )
    parser.add_argument("--sites", type=Path, help="site list JSON file (overrides SITES_FILE)")
    parser.add_argument("--data-dir", help="snapshot directory (overrides DOG_LIST_DIR)")
    parser.add_argument("--headed", action="store_true", help="show the browser window")
    parser.add_argument("--export", type=Path, metavar="XLSX", help="export stored snapshots to a workbook")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if not args.run and not args.export:
        parser.print_help()
        return 1

    config = load_config()
    if args.data_dir:
        config = replace(config, data_dir=resolve_data_dir(args.data_dir))
    if args.sites:
        config = replace(config, sites_file=args.sites)
    if args.headed:
        config = replace(config, headless=False)

    sites = load_sites(config.sites_file)
    logger.info("Loaded %d site(s) from %s", len(sites), config.sites_file)
    store = SnapshotStore(directory=config.data_dir)

    exit_code = 0
    if args.run:
        runner = DogWatcherRunner(
            store=store,
            observer=PlaywrightObserver.from_config(config),
            notifier=build_notifier(config),
        )
        results = asyncio.run(runner.run(sites, dry_run=args.dry_run))
        failed = [result for result in results if result.status == "error"]
        for result in failed:
            logger.error("Site %s failed: %s", result.site_id, result.error)
        if failed:
            exit_code = 2

    if args.export:
        store.export_to_xlsx(args.export, sites)
        logger.info("Exported stored snapshots to %s", args.export)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
