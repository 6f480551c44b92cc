"""
Incremental sync from the bill updates feed.

Meant to run on a short schedule: it looks at the trailing 24 hours of
update events, dedupes the bills they mention and upserts each one. An
empty feed or a failing updates endpoint is a normal, reportable outcome.
"""
import logging
from datetime import datetime, timedelta
from typing import AsyncGenerator, Callable, List, Optional

import httpx

from nysync.config.constants import UPDATE_WINDOW_HOURS, UPDATES_LIMIT
from nysync.database.normalization import normalize_bill_number
from nysync.ingestion.base import BaseIngester
from nysync.ingestion.nys_client import UpstreamError
from nysync.models.nys_api import ApiBillRef
from nysync.models.sync import SyncReport

logger = logging.getLogger(__name__)


def unique_bill_refs(updates: List[ApiBillRef]) -> List[ApiBillRef]:
    """Drop repeated bills, keeping first-seen order. S00256 and S256 are one bill."""
    seen = set()
    unique = []
    for ref in updates:
        if not ref.base_print_no:
            continue
        key = normalize_bill_number(ref.base_print_no)
        if key not in seen:
            seen.add(key)
            unique.append(ref)
    return unique


class BillUpdatesIngester(BaseIngester):
    """
    Upsert bills changed within the last UPDATE_WINDOW_HOURS.

    Args:
        now: Clock used to compute the window (defaults to datetime.utcnow)
    """

    method = "updates"

    def __init__(self, *args, now: Optional[Callable[[], datetime]] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.now = now or datetime.utcnow
        self.total_updates = 0
        self.unique_bills = 0

    async def fetch_data(
        self,
        window_hours: int = UPDATE_WINDOW_HOURS,
    ) -> AsyncGenerator[ApiBillRef, None]:
        """
        Yield one reference per bill updated in the window.

        Refs are fetched in the requested session; the updates feed itself
        spans all sessions.
        """
        self.total_updates = 0
        self.unique_bills = 0

        to_time = self.now()
        from_time = to_time - timedelta(hours=window_hours)

        try:
            updates = await self.api.get_bill_updates(from_time, to_time, limit=UPDATES_LIMIT)
        except (UpstreamError, httpx.HTTPError) as e:
            self.logger.warning(f"Updates endpoint failed: {e}")
            self.message = f"Updates endpoint unavailable ({e}). Will retry next run."
            return

        self.total_updates = len(updates)
        self.logger.info(f"Found {len(updates)} recent bill updates")

        if not updates:
            self.message = f"No bill updates in the last {window_hours} hours."
            return

        refs = unique_bill_refs(updates)
        self.unique_bills = len(refs)
        self.logger.info(f"Processing {len(refs)} unique bills from updates...")

        for ref in refs:
            yield ApiBillRef(base_print_no=ref.base_print_no, session=self.session_year)

    def report(self, **extra) -> SyncReport:
        return super().report(
            total_updates=self.total_updates,
            unique_bills=self.unique_bills,
            **extra,
        )
