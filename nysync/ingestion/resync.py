"""
On-demand syncs: single bills and batch resync of stored bills.

add-bill fetches and upserts one bill whether or not it is stored.
resync-bill and the batch resync only rebuild sponsors, history and votes
of bills already in the store, which is how improved person matching gets
applied to old data without re-deriving bill metadata.
"""
import logging
import time
from typing import AsyncGenerator, Callable, Optional

from nysync.config.constants import normalize_session_year
from nysync.config.settings import settings
from nysync.database.normalization import normalize_bill_number
from nysync.ingestion.base import BaseIngester
from nysync.models.nys_api import ApiBill, ApiBillRef
from nysync.models.sync import BillSyncOutcome, SyncReport

logger = logging.getLogger(__name__)


class BillNotFoundError(LookupError):
    """A resync was requested for a bill that isn't stored."""


class SingleBillSync(BaseIngester):
    """
    Add or resync one bill. Unlike the batch strategies, failures raise.
    """

    method = "single"

    async def fetch_data(self, bill_number: str = "") -> AsyncGenerator[ApiBillRef, None]:
        yield ApiBillRef(base_print_no=normalize_bill_number(bill_number),
                         session=self.session_year)

    async def add(self, bill_number: str, session_year: int) -> BillSyncOutcome:
        """
        Fetch a bill and upsert it.

        Raises:
            NYSApiError: if the API has no usable bill
            StoreError: if the bill row can't be written
        """
        self.session_year = normalize_session_year(session_year)
        await self.connect()
        try:
            async for ref in self.fetch_data(bill_number=bill_number):
                self.logger.info(f"Adding bill: {ref.base_print_no} ({self.session_year})")
                return await self.sync_item(ref)
        finally:
            await self.disconnect()

    async def resync(self, bill_number: str, session_year: int) -> BillSyncOutcome:
        """
        Rebuild children of a stored bill from a fresh fetch.

        Raises:
            BillNotFoundError: if the bill isn't in the store
            NYSApiError: if the API has no usable bill
        """
        self.session_year = normalize_session_year(session_year)
        normalized = normalize_bill_number(bill_number)
        await self.connect()
        try:
            stored = await self.store.find_bill(normalized, self.session_year)
            if not stored:
                raise BillNotFoundError(
                    f"Bill {normalized} ({self.session_year}) not found in database"
                )

            bill = await self.api.get_bill(self.session_year, normalized)
            self._log_roster(bill)
            return await self.upserter.resync_children(
                bill, stored["bill_id"], normalized, self.session_year
            )
        finally:
            await self.disconnect()

    def _log_roster(self, bill: ApiBill):
        """Debug aid for matching problems: who upstream says sponsors this bill."""
        sponsor = bill.primary_sponsor
        if sponsor:
            self.logger.debug(
                f"Sponsor: {sponsor.display_name}, districtCode={sponsor.district_code}, "
                f"chamber={sponsor.chamber}"
            )
        for label, members in (("CoSponsor", bill.co_sponsors), ("MultiSponsor", bill.multi_sponsors)):
            for member in members:
                self.logger.debug(
                    f"{label}: {member.display_name}, districtCode={member.district_code}, "
                    f"chamber={member.chamber}"
                )


class BatchResyncIngester(BaseIngester):
    """
    Re-run sponsor, history and vote sync for a page of stored bills.

    Stops early once the time budget is spent and reports next_offset so
    the caller can continue.

    Args:
        time_budget: Seconds before stopping (default RESYNC_TIME_BUDGET_SECONDS)
        clock: Monotonic clock, replaceable for tests
    """

    method = "resync"

    def __init__(
        self,
        *args,
        time_budget: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.time_budget = (
            settings.RESYNC_TIME_BUDGET_SECONDS if time_budget is None else time_budget
        )
        self.clock = clock
        self.total_bills = 0
        self.offset = 0
        self.batch_size = settings.RESYNC_BATCH_SIZE

    async def fetch_data(
        self,
        batch_size: Optional[int] = None,
        offset: int = 0,
    ) -> AsyncGenerator[dict, None]:
        """
        Yield stored bills for the session, one page ordered by bill_id.
        """
        self.batch_size = batch_size or settings.RESYNC_BATCH_SIZE
        self.offset = offset

        self.total_bills = await self.store.count_session_bills(self.session_year)
        rows = await self.store.list_session_bills(
            self.session_year, offset=self.offset, limit=self.batch_size
        )
        if not rows:
            self.message = "No bills to resync in this range"
            return

        self.logger.info(
            f"Resync: processing {len(rows)} bills "
            f"(offset {self.offset} of {self.total_bills} total)"
        )
        started = self.clock()
        for row in rows:
            if self.clock() - started > self.time_budget:
                self.logger.info("Approaching time budget, stopping early")
                return
            yield row

    async def sync_item(self, item: dict) -> BillSyncOutcome:
        session_year = item.get("session_id") or self.session_year
        bill = await self.api.get_bill(session_year, item["bill_number"])
        return await self.upserter.resync_children(
            bill, item["bill_id"], item["bill_number"], session_year
        )

    def item_label(self, item: dict) -> str:
        return item.get("bill_number", "?")

    def report(self, **extra) -> SyncReport:
        next_offset = self.offset + self.stats["processed"]
        has_more = next_offset < self.total_bills
        return super().report(
            total_bills=self.total_bills,
            offset=self.offset,
            batch_size=self.batch_size,
            succeeded=self.stats["succeeded"],
            next_offset=next_offset if has_more else None,
            has_more=has_more,
            **extra,
        )
