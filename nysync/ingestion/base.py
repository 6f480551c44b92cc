"""
Base ingester for the bill sync strategies.

Each strategy yields bill references; the base class fetches full detail,
hands it to the upserter and keeps the statistics that end up in the
report. Bills are processed strictly one at a time with a fixed delay
between upstream calls.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, AsyncGenerator, Optional

from nysync.config.constants import MAX_ERROR_DETAILS, normalize_session_year
from nysync.config.settings import settings
from nysync.database.connection import get_async_database
from nysync.database.store import BillStore
from nysync.ingestion.bill_upsert import BillUpserter
from nysync.ingestion.nys_client import NYSLegislationClient
from nysync.ingestion.person_matcher import SyncContext
from nysync.models.nys_api import ApiBillRef
from nysync.models.sync import BillSyncOutcome, ErrorDetail, SyncReport


class BaseIngester(ABC):
    """
    Base class for the bill sync strategies.

    Args:
        store: Data-access layer (built from settings when omitted)
        api: NYS API client (built from settings when omitted)
        request_delay: Seconds to wait after each bill
    """

    method: str = "sync"

    def __init__(
        self,
        store: Optional[BillStore] = None,
        api: Optional[NYSLegislationClient] = None,
        request_delay: Optional[float] = None,
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.store = store
        self.api = api
        self._owns_api = api is None
        self.request_delay = (
            settings.REQUEST_DELAY_SECONDS if request_delay is None else request_delay
        )
        self.context: Optional[SyncContext] = None
        self.upserter: Optional[BillUpserter] = None
        self.session_year: Optional[int] = None
        self.message: Optional[str] = None
        self.reset_stats()

    async def connect(self):
        """
        Build the store, API client and a fresh per-run context.

        Raises:
            ConfigurationError: if credentials needed for a default
                collaborator are missing
        """
        if self.api is None:
            settings.require("NYS_LEGISLATION_API_KEY")
            self.api = NYSLegislationClient()
            self._owns_api = True
        if self.store is None:
            self.store = BillStore(get_async_database())
            self.logger.info(f"Connected to MongoDB: {settings.MONGODB_DATABASE}")

        # New context per run: people are reloaded on first match
        self.context = SyncContext(self.store)
        self.upserter = BillUpserter(self.context)

    async def disconnect(self):
        """Close the API client if we created it."""
        if self.api is not None and self._owns_api:
            await self.api.close()
            self.api = None

    @abstractmethod
    async def fetch_data(self, **kwargs) -> AsyncGenerator[Any, None]:
        """
        Yield the items to process.

        Args:
            **kwargs: Strategy parameters passed through run()

        Yields:
            Bill references (or stored bill rows for resync strategies)
        """
        yield  # pragma: no cover

    async def sync_item(self, item: Any) -> BillSyncOutcome:
        """
        Fetch full detail for one bill reference and upsert it.

        Override for strategies that don't upsert the bill row.
        """
        ref: ApiBillRef = item
        session_year = ref.session or self.session_year
        bill = await self.api.get_bill(session_year, ref.base_print_no)
        return await self.upserter.upsert_bill(bill, session_year)

    def item_label(self, item: Any) -> str:
        return getattr(item, "base_print_no", None) or str(item)

    async def process_item(self, item: Any) -> Optional[BillSyncOutcome]:
        """
        Process one bill, recording failures instead of raising.

        Returns:
            The outcome, or None if the bill failed
        """
        self.stats["processed"] += 1
        try:
            outcome = await self.sync_item(item)
        except Exception as e:
            self.record_error(self.item_label(item), e)
            return None

        if outcome.inserted:
            self.stats["inserted"] += 1
        if outcome.updated:
            self.stats["updated"] += 1
        if outcome.degraded:
            self.stats["degraded"] += 1
        self.stats["succeeded"] += 1

        if self.stats["processed"] % 50 == 0:
            self.logger.info(f"Progress: {self.stats['processed']} bills processed")
        return outcome

    def record_error(self, label: str, error: Exception):
        self.stats["errors"] += 1
        if len(self.stats["error_details"]) < MAX_ERROR_DETAILS:
            self.stats["error_details"].append(ErrorDetail(bill_number=label, error=str(error)))
        self.logger.error(f"Failed to process bill {label}: {error}")

    async def run(self, session_year: int, **kwargs) -> SyncReport:
        """
        Execute the strategy.

        Args:
            session_year: Session to sync; even years map to the prior odd year
            **kwargs: Passed to fetch_data()

        Returns:
            Report with counts, duration and the first errors
        """
        self.reset_stats()
        self.session_year = normalize_session_year(session_year)
        self.logger.info(f"Starting {self.__class__.__name__} for session {self.session_year}...")
        self.stats["started_at"] = datetime.utcnow()

        try:
            await self.connect()

            async for item in self.fetch_data(**kwargs):
                await self.process_item(item)
                if self.request_delay:
                    await asyncio.sleep(self.request_delay)

        except Exception as e:
            self.logger.error(f"Fatal error during sync: {e}")
            raise

        finally:
            self.stats["completed_at"] = datetime.utcnow()
            if self.context is not None:
                self.stats["unmatched_people"] = self.context.matcher.unmatched

            duration = self.stats["completed_at"] - self.stats["started_at"]
            self.logger.info(
                f"Sync complete. "
                f"Processed: {self.stats['processed']}, "
                f"Inserted: {self.stats['inserted']}, "
                f"Updated: {self.stats['updated']}, "
                f"Errors: {self.stats['errors']}, "
                f"Duration: {duration}"
            )

            await self.disconnect()

        return self.report()

    def report(self, **extra) -> SyncReport:
        """Build the report from the current statistics."""
        started = self.stats["started_at"]
        completed = self.stats["completed_at"] or datetime.utcnow()
        duration = (completed - started).total_seconds() if started else 0.0
        return SyncReport(
            success=True,
            session_year=self.session_year,
            method=self.method,
            message=self.message,
            processed=self.stats["processed"],
            inserted=self.stats["inserted"],
            updated=self.stats["updated"],
            errors=self.stats["errors"],
            degraded=self.stats["degraded"],
            unmatched_people=self.stats["unmatched_people"],
            duration=f"{duration}s",
            error_details=list(self.stats["error_details"]),
            **extra,
        )

    def reset_stats(self):
        """Reset statistics counters"""
        self.message = None
        self.stats = {
            "processed": 0,
            "inserted": 0,
            "updated": 0,
            "succeeded": 0,
            "errors": 0,
            "degraded": 0,
            "unmatched_people": 0,
            "error_details": [],
            "started_at": None,
            "completed_at": None,
        }
