"""
Verify your .env configuration works.

Run this before the first sync to catch configuration issues early:
pings MongoDB and fetches one known bill from the legislation API.

Usage:
    uv run python scripts/check_connection.py
"""
import asyncio
import sys
from pathlib import Path

import httpx

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from nysync.config import ConfigurationError, current_session_year, settings
from nysync.config.constants import DIAGNOSTIC_KNOWN_BILL
from nysync.database import close_async_client, get_async_database, ping_database
from nysync.ingestion.nys_client import NYSLegislationClient, UpstreamError


async def check_mongodb() -> bool:
    """Ping MongoDB and report the sync collections"""
    print("🔍 Testing MongoDB connection...")
    print(f"   Database: {settings.MONGODB_DATABASE}")

    try:
        await ping_database()
        db = get_async_database()
        people = await db.people.count_documents({})
        bills = await db.bills.count_documents({})
        print("   ✅ MongoDB connection successful!")
        print(f"   👥 {people} people available for matching, {bills} bills stored")
        if not people:
            print("   ⚠️  People collection is empty: sponsors and votes will not be matched")
        return True
    except ConfigurationError as e:
        print(f"   ❌ {e}")
        return False
    except Exception as e:
        print(f"   ❌ MongoDB connection failed: {e}")
        return False
    finally:
        close_async_client()


async def check_nys_api() -> bool:
    """Fetch one bill with the configured API key"""
    print("\n🔍 Testing NYS Open Legislation API key...")
    if not settings.NYS_LEGISLATION_API_KEY:
        print("   ❌ NYS_LEGISLATION_API_KEY is not set")
        return False
    print(f"   Key: {settings.NYS_LEGISLATION_API_KEY[:4]}...")

    session = current_session_year()
    try:
        async with NYSLegislationClient() as client:
            bill = await client.get_bill(session, DIAGNOSTIC_KNOWN_BILL)
        print(f"   ✅ API working! {DIAGNOSTIC_KNOWN_BILL} ({session}): {bill.title[:60] if bill.title else 'untitled'}")
        return True
    except (UpstreamError, httpx.HTTPError) as e:
        print(f"   ❌ API error: {e}")
        return False


async def main():
    print("=" * 60)
    print(f"{settings.APP_NAME} - configuration check")
    print("=" * 60)

    results = [await check_mongodb(), await check_nys_api()]

    print("\n" + "=" * 60)
    if all(results):
        print("✅ All checks passed. Ready to sync!")
    else:
        print("❌ Some checks failed. Fix your .env and try again.")
    sys.exit(0 if all(results) else 1)


if __name__ == "__main__":
    asyncio.run(main())
