"""
Reconcile one API bill against the store.

Finds the stored row by (bill_number, session_id), reuses or derives its
bill_id, writes the bill, then rebuilds sponsors, history and votes. Only
the bill write is fatal; child failures are recorded on the outcome.
"""
import logging
from datetime import date, datetime
from typing import Awaitable, Callable, Optional

from nysync.config.constants import normalize_session_year
from nysync.database.normalization import (
    bill_api_url,
    bill_site_url,
    committee_slug,
    derive_bill_id,
    map_status_to_code,
    normalize_bill_number,
)
from nysync.ingestion.child_records import ChildRecordSyncer
from nysync.ingestion.person_matcher import SyncContext
from nysync.models.legislation import Bill
from nysync.models.nys_api import ApiBill
from nysync.models.sync import BillSyncOutcome, PartResult

logger = logging.getLogger(__name__)


class InvalidBillError(ValueError):
    """The payload has no usable print number."""


class BillUpserter:
    """
    Upsert bills and their dependent records for one sync run.

    Args:
        context: Per-run store, people cache and matcher
    """

    def __init__(self, context: SyncContext):
        self.context = context
        self.store = context.store
        self.children = ChildRecordSyncer(context.store, context.matcher)

    async def upsert_bill(self, bill: ApiBill, session_year: int) -> BillSyncOutcome:
        """
        Insert or update a bill, then rebuild its children.

        Args:
            bill: Parsed bill detail from the API
            session_year: Session the caller asked for; the payload's own
                session wins when present

        Returns:
            Outcome with inserted/updated and per-part results

        Raises:
            InvalidBillError: payload has no print number
            StoreError: the bill row could not be written
        """
        session_year = bill.session or normalize_session_year(session_year)

        bill_number = normalize_bill_number(bill.print_number)
        if not bill_number:
            raise InvalidBillError("Bill payload has no print number")

        existing = await self.store.find_bill(bill_number, session_year)
        if existing:
            bill_id = existing["bill_id"]
        else:
            bill_id = derive_bill_id(bill_number, session_year)

        record = self.transform(bill, bill_id, bill_number, session_year)
        await self.store.upsert_bill(record)

        outcome = await self.resync_children(bill, bill_id, bill_number, session_year)
        outcome.title = record.title
        outcome.inserted = existing is None
        outcome.updated = existing is not None

        logger.info(f"✓ Synced bill {bill_number} ({session_year}): {record.title[:50]}...")
        return outcome

    async def resync_children(
        self,
        bill: ApiBill,
        bill_id: int,
        bill_number: str,
        session_year: int,
    ) -> BillSyncOutcome:
        """Rebuild sponsors, history and votes without touching the bill row."""
        outcome = BillSyncOutcome(bill_number=bill_number, session_id=session_year, bill_id=bill_id)
        outcome.sponsors = await self._run_part("sponsors", bill_id, self.children.sync_sponsors, bill)
        outcome.history = await self._run_part("history", bill_id, self.children.sync_history, bill)
        outcome.votes = await self._run_part("votes", bill_id, self.children.sync_votes, bill)
        return outcome

    async def _run_part(
        self,
        name: str,
        bill_id: int,
        sync: Callable[[ApiBill, int], Awaitable[Optional[int]]],
        bill: ApiBill,
    ) -> PartResult:
        try:
            rows = await sync(bill, bill_id)
        except Exception as e:
            logger.warning(f"Warning syncing {name} for bill {bill_id}: {e}")
            return PartResult(ok=False, error=str(e))
        if rows is None:
            return PartResult(skipped=True)
        return PartResult(rows=rows)

    @staticmethod
    def transform(bill: ApiBill, bill_id: int, bill_number: str, session_year: int) -> Bill:
        """
        Map an API bill to our Bill model.

        Args:
            bill: Parsed API payload
            bill_id: Reused or derived surrogate key
            bill_number: Normalized print number
            session_year: Effective session

        Returns:
            Bill model instance
        """
        status = bill.status
        committee = bill.committee_name
        status_label = status.status_desc or status.status_type

        return Bill(
            bill_id=bill_id,
            bill_number=bill_number,
            session_id=session_year,
            title=bill.title or "Untitled Bill",
            description=bill.summary or bill.title or None,
            status=map_status_to_code(status.status_type or status.status_desc),
            status_desc=status_label or "Unknown",
            status_date=status.action_date,
            committee=committee,
            committee_id=committee_slug(committee),
            last_action_date=(
                status.action_date
                or bill.published_date_time
                or date.today().isoformat()
            ),
            last_action=status_label or "Introduced",
            url=bill_api_url(bill_number, session_year),
            state_link=bill_site_url(bill_number, session_year),
            last_updated=datetime.utcnow(),
        )
