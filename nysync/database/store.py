"""
Data-access layer for the bill sync.

BillStore is the only place that knows collection names and query shapes.
Child records are always replaced wholesale per bill (delete, then insert),
so none of these methods diff anything.
"""
import logging
from typing import Iterable, List, Optional, Sequence

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from nysync.config.constants import (
    COLLECTION_BILLS,
    COLLECTION_HISTORY,
    COLLECTION_PEOPLE,
    COLLECTION_ROLL_CALLS,
    COLLECTION_SPONSORS,
    COLLECTION_VOTES,
    INSERT_BATCH_SIZE,
)
from nysync.models.legislation import Bill, HistoryEntry, MemberVote, RollCall, Sponsor
from nysync.models.people import Person

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """A write the caller cannot continue without failed."""


def chunked(items: Sequence, size: int = INSERT_BATCH_SIZE) -> Iterable[Sequence]:
    """Yield successive slices of at most `size` items."""
    if size <= 0:
        raise ValueError("size must be positive")
    for start in range(0, len(items), size):
        yield items[start:start + size]


class BillStore:
    """
    Bills, sponsors, history, roll calls and votes, plus read-only people.

    Args:
        db: Motor database handle
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.bills = db[COLLECTION_BILLS]
        self.sponsors = db[COLLECTION_SPONSORS]
        self.history = db[COLLECTION_HISTORY]
        self.roll_calls = db[COLLECTION_ROLL_CALLS]
        self.votes = db[COLLECTION_VOTES]
        self.people = db[COLLECTION_PEOPLE]

    async def ensure_indexes(self) -> None:
        """Create the natural-key indexes the sync relies on."""
        await self.bills.create_index("bill_id", unique=True)
        await self.bills.create_index(
            [("bill_number", ASCENDING), ("session_id", ASCENDING)], unique=True
        )
        await self.sponsors.create_index("bill_id")
        await self.history.create_index("bill_id")
        await self.roll_calls.create_index("roll_call_id", unique=True)
        await self.roll_calls.create_index("bill_id")
        await self.votes.create_index(
            [("people_id", ASCENDING), ("roll_call_id", ASCENDING)], unique=True
        )
        logger.info("Ensured bill sync indexes")

    # ------------------------------------------------------------------
    # Bills
    # ------------------------------------------------------------------

    async def find_bill(self, bill_number: str, session_id: int) -> Optional[dict]:
        """Look up a bill by its natural key."""
        return await self.bills.find_one(
            {"bill_number": bill_number, "session_id": session_id},
            {"_id": 0},
        )

    async def upsert_bill(self, bill: Bill) -> None:
        """
        Insert or replace all fields of a bill keyed on bill_id.

        Raises:
            StoreError: if the write fails
        """
        try:
            await self.bills.update_one(
                {"bill_id": bill.bill_id},
                {"$set": bill.model_dump()},
                upsert=True,
            )
        except PyMongoError as e:
            raise StoreError(f"Failed to upsert bill {bill.bill_number}: {e}") from e

    async def count_session_bills(self, session_id: int) -> int:
        return await self.bills.count_documents({"session_id": session_id})

    async def list_session_bills(
        self,
        session_id: int,
        offset: int = 0,
        limit: int = 50,
    ) -> List[dict]:
        """Stored bills for a session ordered by bill_id, one page."""
        cursor = self.bills.find(
            {"session_id": session_id},
            {"_id": 0, "bill_id": 1, "bill_number": 1, "session_id": 1},
            sort=[("bill_id", ASCENDING)],
            skip=offset,
            limit=limit,
        )
        return await cursor.to_list(length=limit)

    # ------------------------------------------------------------------
    # Sponsors and history
    # ------------------------------------------------------------------

    async def replace_sponsors(self, bill_id: int, sponsors: List[Sponsor]) -> int:
        """Delete every sponsor row for the bill, then insert the new set."""
        await self.sponsors.delete_many({"bill_id": bill_id})
        return await self._insert_batches(self.sponsors, [s.model_dump() for s in sponsors])

    async def replace_history(self, bill_id: int, entries: List[HistoryEntry]) -> int:
        """Delete every history row for the bill, then insert the new set."""
        await self.history.delete_many({"bill_id": bill_id})
        return await self._insert_batches(self.history, [e.model_dump() for e in entries])

    # ------------------------------------------------------------------
    # Roll calls and votes
    # ------------------------------------------------------------------

    async def roll_call_ids_for_bill(self, bill_id: int) -> List[int]:
        cursor = self.roll_calls.find({"bill_id": bill_id}, {"_id": 0, "roll_call_id": 1})
        return [doc["roll_call_id"] async for doc in cursor]

    async def delete_votes_for_bill(self, bill_id: int) -> int:
        """
        Remove all roll calls of a bill and the votes cast on them.

        Votes go first so none is left pointing at a missing roll call.
        """
        roll_call_ids = await self.roll_call_ids_for_bill(bill_id)
        if not roll_call_ids:
            return 0
        await self.votes.delete_many({"roll_call_id": {"$in": roll_call_ids}})
        await self.roll_calls.delete_many({"bill_id": bill_id})
        return len(roll_call_ids)

    async def upsert_roll_call(self, roll_call: RollCall) -> None:
        await self.roll_calls.update_one(
            {"roll_call_id": roll_call.roll_call_id},
            {"$set": roll_call.model_dump()},
            upsert=True,
        )

    async def upsert_votes(self, votes: List[MemberVote]) -> int:
        """Upsert votes on (people_id, roll_call_id)."""
        for vote in votes:
            await self.votes.update_one(
                {"people_id": vote.people_id, "roll_call_id": vote.roll_call_id},
                {"$set": vote.model_dump()},
                upsert=True,
            )
        return len(votes)

    # ------------------------------------------------------------------
    # People (read-only)
    # ------------------------------------------------------------------

    async def load_people(self) -> List[Person]:
        cursor = self.people.find(
            {},
            {"_id": 0, "people_id": 1, "name": 1, "first_name": 1, "last_name": 1, "district": 1},
        )
        return [Person.model_validate(doc) async for doc in cursor]

    async def _insert_batches(self, collection, documents: List[dict]) -> int:
        inserted = 0
        for batch in chunked(documents):
            await collection.insert_many(list(batch))
            inserted += len(batch)
        return inserted
