"""
Item sync from the command line.

Usage:
    # Full sync of the newest patch
    python scripts/sync_items.py sync

    # Targeted sync of two items on a given patch
    python scripts/sync_items.py sync --version 16.1.1 --items 3031,6672

    # Dry run: what would change
    python scripts/sync_items.py diff

    # Is a newer patch out?
    python scripts/sync_items.py check

    # Re-upload icons
    python scripts/sync_items.py refresh-images --items 3031,6672

    # Record raw changes since a baseline patch
    python scripts/sync_items.py patch-diff --baseline 16.1.1
"""

import argparse
import os
import sys

# Allow imports from the project root when running as a script
_root_dir = os.path.join(os.path.dirname(__file__), "..")
sys.path.insert(0, _root_dir)

from dotenv import load_dotenv
load_dotenv(os.path.join(_root_dir, ".env"))

from models.sync import DiffStatus
from services.patch_service import get_patch_service
from services.sync_service import get_sync_service

SEPARATOR = "=" * 50


def _split_ids(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def run_sync(args) -> bool:
    item_ids = _split_ids(args.items) if args.items else None
    summary = get_sync_service().sync(args.version, item_ids)

    print(SEPARATOR)
    print(f"  SYNC -- {summary.version}")
    print(SEPARATOR)
    print(f"  Total:    {summary.total}")
    print(f"  Skipped:  {summary.skipped_count}")
    print(f"  Success:  {summary.success_count}")
    print(f"  Failed:   {summary.failed_count}")
    print(f"  Deleted:  {summary.deleted_count}")

    if summary.errors:
        print()
        print("Failed items:")
        for line in summary.errors:
            print(f"  - {line}")

    return summary.success


def run_diff(args) -> bool:
    report = get_sync_service().scan(args.version)

    print(SEPARATOR)
    print(f"  DIFF -- {report.version}")
    print(SEPARATOR)
    for status in DiffStatus:
        print(f"  {status.value + ':':<11} {report.counts[status.value]}")

    changed = [e for e in report.entries if e.status is not DiffStatus.UNCHANGED]
    if changed:
        print()
    for entry in changed:
        name = entry.item.get("name_ja", "")
        fields = f" ({', '.join(entry.changed_fields)})" if entry.changed_fields else ""
        print(f"  {entry.status.value:<8} {entry.riot_id:<8} {name}{fields}")

    return True


def run_check(args) -> bool:
    result = get_patch_service().check_for_updates()

    print(f"Current patch: {result.current_patch or '-'}")
    print(f"Latest patch:  {result.latest_patch}")
    print(f"Update needed: {'yes' if result.should_update else 'no'}")
    if result.error:
        print(f"ERROR: {result.error}")
        return False
    return True


def run_refresh_images(args) -> bool:
    summary = get_sync_service().refresh_images(_split_ids(args.items), args.version)

    print(f"Refreshed: {summary.success_count}, failed: {summary.failed_count}")
    for line in summary.errors:
        print(f"  - {line}")

    return summary.success


def run_patch_diff(args) -> bool:
    summary = get_sync_service().record_patch_diff(args.baseline, args.version)

    print(f"{summary.changed} item(s) changed between {summary.baseline_version} and {summary.version}")
    return True


def main():
    parser = argparse.ArgumentParser(
        description="Sync Data Dragon items into the items table."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser("sync", help="Run a sync")
    sync_parser.add_argument("--version", default=None, help="Patch version (default: latest)")
    sync_parser.add_argument(
        "--items",
        default="",
        help="Comma-separated riot ids for a targeted sync (no deletion)",
    )
    sync_parser.set_defaults(handler=run_sync)

    diff_parser = subparsers.add_parser("diff", help="Show what a sync would change")
    diff_parser.add_argument("--version", default=None, help="Patch version (default: latest)")
    diff_parser.set_defaults(handler=run_diff)

    check_parser = subparsers.add_parser("check", help="Check for a newer patch")
    check_parser.set_defaults(handler=run_check)

    refresh_parser = subparsers.add_parser("refresh-images", help="Re-upload item icons")
    refresh_parser.add_argument("--items", required=True, help="Comma-separated riot ids")
    refresh_parser.add_argument("--version", default=None, help="Patch version (default: latest)")
    refresh_parser.set_defaults(handler=run_refresh_images)

    patch_diff_parser = subparsers.add_parser("patch-diff", help="Record raw changes between patches")
    patch_diff_parser.add_argument("--baseline", required=True, help="Older patch version")
    patch_diff_parser.add_argument("--version", default=None, help="Newer patch (default: latest)")
    patch_diff_parser.set_defaults(handler=run_patch_diff)

    args = parser.parse_args()

    success = args.handler(args)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
