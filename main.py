"""Command line entry point for webstats maintenance tasks.

Loads environment variables, builds components from configuration and runs
one of: an update check, a latest-version report, a cache backend report, or
a configuration validation.
"""
from dotenv import load_dotenv
import argparse
import asyncio
import json
import os
import sys

# Load environment variables first, before configuration is read
load_dotenv()

from webstats.cache import create_eager_cache
from webstats.config import get_config
from webstats.exceptions import ConfigurationError
from webstats.options import FileOptionStore
from webstats.update_check import UpdateChecker
from webstats.utils.logger import configure_logging, log_error, log_info


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="webstats maintenance tasks.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check-update", help="Check for a newer release.")
    check.add_argument("--force", action="store_true", help="Ignore the check interval.")
    check.add_argument("--interval", type=int, help="Minimum seconds between checks.")
    check.add_argument("--trigger", default="cli", help="Trigger reported to the version service.")

    subparsers.add_parser("latest-version", help="Print the newer release, if any.")
    subparsers.add_parser("cache-info", help="Build the configured cache backend and print its stats.")
    subparsers.add_parser("validate-config", help="Report configuration issues.")
    return parser


def _option_store(config) -> FileOptionStore:
    return FileOptionStore(os.path.join(config.get_tmp_path(), "options.json"))


async def _cache_info(config) -> dict:
    eager = await create_eager_cache(config)
    try:
        return {**eager.backend.get_stats(), "eager_cache_id": eager.cache_id}
    finally:
        await eager.backend.close()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = get_config()
    configure_logging(config.log_level, config.log_format)
    config.log_configuration()

    if args.command == "validate-config":
        issues = config.validate_configuration()
        if issues:
            log_error("Configuration validation failed", issues=issues)
            for issue in issues:
                print(f"  - {issue}")
            return 1
        print("Configuration OK")
        return 0

    if args.command == "cache-info":
        try:
            stats = asyncio.run(_cache_info(config))
        except ConfigurationError as e:
            print(f"Cache configuration error: {e}", file=sys.stderr)
            return 1
        print(json.dumps(stats, indent=2, default=str))
        return 0

    checker = UpdateChecker(config, _option_store(config))

    if args.command == "check-update":
        checked = checker.check(force=args.force, interval=args.interval, trigger=args.trigger)
        log_info("Update check finished", checked=checked, latest_version=checker.get_latest_version())

    newer = checker.is_newest_version_available()
    if newer:
        print(f"A newer version is available: {newer}")
        print(f"Download: {checker.get_archive_url_for_release_channel(newer)}")
    else:
        print(f"webstats {checker.current_version} is up to date")
    return 0


if __name__ == "__main__":
    sys.exit(main())
