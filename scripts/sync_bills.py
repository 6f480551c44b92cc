"""
Script to trigger a bill sync action from the command line.

Usage:
    uv run python scripts/sync_bills.py sync-bills                       # last 24h of updates
    uv run python scripts/sync_bills.py full-sync --max-bills 200        # session backfill
    uv run python scripts/sync_bills.py resync --batch-size 50 --offset 100
    uv run python scripts/sync_bills.py add-bill --bill S256 --session 2025
    uv run python scripts/sync_bills.py resync-bill --bill A1234
    uv run python scripts/sync_bills.py diagnose-sync
"""
import asyncio
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from nysync.actions import ACTIONS, dispatch
from nysync.config import settings
from nysync.database import close_async_client


def build_body(args) -> dict:
    """Translate CLI arguments into a dispatch request body."""
    body = {"action": args.action}
    if args.session:
        body["sessionYear"] = args.session
    if args.bill:
        body["billNumber"] = args.bill
    if args.batch_size:
        body["batchSize"] = args.batch_size
    if args.offset:
        body["offset"] = args.offset
    if args.max_bills is not None:
        body["maxBills"] = args.max_bills
    return body


async def main():
    """CLI entry point"""
    import argparse

    parser = argparse.ArgumentParser(
        description="Sync New York State bills from the Open Legislation API"
    )
    parser.add_argument("action", choices=sorted(ACTIONS), help="Action to run")
    parser.add_argument(
        "--session",
        type=int,
        help="Session year (default: current session; even years map to the prior odd year)"
    )
    parser.add_argument("--bill", help="Bill number for add-bill / resync-bill (e.g. S256)")
    parser.add_argument(
        "--batch-size",
        type=int,
        help=f"Bills per resync batch (default: {settings.RESYNC_BATCH_SIZE})"
    )
    parser.add_argument("--offset", type=int, default=0, help="Resync starting offset")
    parser.add_argument(
        "--max-bills",
        type=int,
        help=f"Bill limit for full-sync (default: {settings.FULL_SYNC_MAX_BILLS})"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(level=log_level, format=settings.LOG_FORMAT)

    try:
        response = await dispatch(build_body(args))
    except KeyboardInterrupt:
        print("\n\n⚠️  Sync interrupted")
        sys.exit(1)
    finally:
        close_async_client()

    print(json.dumps(response.body, indent=2, default=str))
    sys.exit(0 if response.status_code == 200 else 1)


if __name__ == "__main__":
    asyncio.run(main())
