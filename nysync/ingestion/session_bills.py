"""
Full backfill of a session from the bill listing.

Pages through /bills/{session} and upserts every bill. A run stops after
a fixed number of bills so it fits in one invocation; the next run starts
again from offset 0, which is harmless because upserts are idempotent.
"""
import asyncio
import logging
from typing import AsyncGenerator, Optional

from nysync.config.constants import LISTING_PAGE_SIZE
from nysync.config.settings import settings
from nysync.ingestion.base import BaseIngester
from nysync.models.nys_api import ApiBillRef

logger = logging.getLogger(__name__)


class SessionBillsIngester(BaseIngester):
    """
    Backfill bills for one session from the paginated listing.
    """

    method = "full"

    def __init__(self, *args, page_delay: Optional[float] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.page_delay = settings.PAGE_DELAY_SECONDS if page_delay is None else page_delay

    async def fetch_data(
        self,
        max_bills: Optional[int] = None,
        page_size: int = LISTING_PAGE_SIZE,
    ) -> AsyncGenerator[ApiBillRef, None]:
        """
        Yield bill references page by page.

        Args:
            max_bills: Stop after this many bills (default FULL_SYNC_MAX_BILLS)
            page_size: Listing page size

        Yields:
            Bill references from the listing

        Raises:
            NYSApiError: if a listing page fails; that ends the run
        """
        max_bills = settings.FULL_SYNC_MAX_BILLS if max_bills is None else max_bills
        offset = 0

        while True:
            self.logger.info(f"Fetching bills at offset {offset}...")
            refs, total = await self.api.list_bills(self.session_year, limit=page_size, offset=offset)
            self.logger.info(f"Got {len(refs)} bills at offset {offset} (total {total})")

            if not refs:
                break

            for ref in refs:
                if not ref.base_print_no:
                    continue
                if self.stats["processed"] >= max_bills:
                    self.logger.info("Reached batch limit, will continue in next run")
                    return
                yield ref

            if len(refs) < page_size:
                break

            offset += page_size
            if self.page_delay:
                await asyncio.sleep(self.page_delay)
