"""
Sync outcome and report models.

BillSyncOutcome records what happened to one bill (which parts succeeded);
SyncReport is the JSON summary every sync action returns and is what
monitoring reads, so its camelCase keys are a contract.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PartResult(BaseModel):
    """Result of one child-record sync (sponsors, history or votes)."""
    ok: bool = True
    rows: int = 0
    skipped: bool = False  # upstream list empty, stored rows left alone
    error: Optional[str] = None


class BillSyncOutcome(BaseModel):
    """
    Per-bill outcome of an upsert or a child-only resync.

    inserted/updated reflect whether the bill row existed before the sync.
    A failed child part does not fail the bill.
    """
    bill_number: str
    session_id: int
    bill_id: int
    title: Optional[str] = None
    inserted: bool = False
    updated: bool = False
    sponsors: PartResult = Field(default_factory=PartResult)
    history: PartResult = Field(default_factory=PartResult)
    votes: PartResult = Field(default_factory=PartResult)

    @property
    def degraded(self) -> bool:
        return not (self.sponsors.ok and self.history.ok and self.votes.ok)

    @property
    def failed_parts(self) -> List[str]:
        return [
            name for name in ("sponsors", "history", "votes")
            if not getattr(self, name).ok
        ]


class ErrorDetail(BaseModel):
    """One per-bill failure kept in a report."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    bill_number: str
    error: str


class SyncReport(BaseModel):
    """
    Summary returned by every sync strategy.

    Only the counters are always present; strategy-specific fields are
    dropped from the response when unset.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    session_year: Optional[int] = None
    method: Optional[str] = None
    message: Optional[str] = None

    processed: int = 0
    inserted: int = 0
    updated: int = 0
    errors: int = 0
    degraded: int = 0
    unmatched_people: int = 0
    duration: Optional[str] = None
    error_details: List[ErrorDetail] = Field(default_factory=list)

    # Incremental sync
    total_updates: Optional[int] = None
    unique_bills: Optional[int] = None

    # Batch resync
    total_bills: Optional[int] = None
    offset: Optional[int] = None
    batch_size: Optional[int] = None
    succeeded: Optional[int] = None
    next_offset: Optional[int] = None
    has_more: Optional[bool] = None

    def to_response(self) -> dict:
        """Serialize with camelCase keys for the caller."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        if self.has_more is not None:
            data["nextOffset"] = self.next_offset
        return data
