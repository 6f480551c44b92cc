"""
Setup Database Indexes

Creates the natural-key indexes the bill sync relies on (bill_id,
bill_number + session_id, roll_call_id, people_id + roll_call_id).

Usage:
    uv run python scripts/setup_indexes.py

    # Just list existing indexes
    uv run python scripts/setup_indexes.py --list
"""
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from nysync.database import BillStore, close_async_client, get_async_database


async def list_indexes(store: BillStore):
    for collection in (store.bills, store.sponsors, store.history,
                       store.roll_calls, store.votes, store.people):
        info = await collection.index_information()
        print(f"\n📁 {collection.name}")
        for name, spec in info.items():
            unique = " (unique)" if spec.get("unique") else ""
            print(f"   • {name}: {spec['key']}{unique}")


async def main():
    import argparse

    parser = argparse.ArgumentParser(
        description="Create MongoDB indexes for the NYS bill sync"
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List existing indexes only (don't create)"
    )
    args = parser.parse_args()

    store = BillStore(get_async_database())
    try:
        if args.list:
            await list_indexes(store)
        else:
            await store.ensure_indexes()
            print("✅ Indexes created")
    finally:
        close_async_client()


if __name__ == "__main__":
    asyncio.run(main())
