"""
Legislation data models.

Defines the stored shape of bills and their dependent records:
sponsors, history entries, roll calls and individual votes.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Bill(BaseModel):
    """
    A piece of New York State legislation within one session.

    (bill_number, session_id) is the natural key; bill_id is the surrogate
    the child records point at.
    """

    # Surrogate key (e.g., 2025000256 for S256 in 2025)
    bill_id: int = Field(..., description="session * 1e6 + chamber offset + number")

    # Normalized print number (e.g., "S256A")
    bill_number: str
    session_id: int

    # Content
    title: str
    description: Optional[str] = None

    # Status
    status: int = 0
    status_desc: str = "Unknown"
    status_date: Optional[str] = None
    committee: Optional[str] = None
    committee_id: Optional[str] = None
    last_action_date: Optional[str] = None
    last_action: Optional[str] = None

    # Links
    url: Optional[str] = None
    state_link: Optional[str] = None

    # Metadata
    last_updated: datetime = Field(default_factory=datetime.utcnow)

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"{self.bill_number} ({self.session_id}): {self.title[:60]}..."


class Sponsor(BaseModel):
    """A legislator attached to a bill. Position 1 is the primary sponsor."""
    bill_id: int
    people_id: int
    position: int


class HistoryEntry(BaseModel):
    """One legislative action on a bill."""
    bill_id: int
    date: Optional[str] = None
    sequence: int = 0
    action: Optional[str] = None
    chamber: Optional[str] = None


class RollCall(BaseModel):
    """
    A recorded vote event on a bill.

    roll_call_id is bill_id * 100 + the 1-based position of the event in
    the upstream vote list.
    """
    roll_call_id: int
    bill_id: int
    date: Optional[str] = None
    chamber: Optional[str] = None
    description: Optional[str] = None
    yea: int = 0
    nay: int = 0
    absent: int = 0
    nv: int = 0
    total: int = 0


class MemberVote(BaseModel):
    """
    How a specific legislator voted on a roll call.
    """
    people_id: int
    roll_call_id: int
    vote: int  # 1 Yea, 2 Nay, 3 Absent, 4 NV, 0 other
    vote_desc: str
