"""Data models module."""

from nysync.models.legislation import (
    Bill,
    Sponsor,
    HistoryEntry,
    RollCall,
    MemberVote,
)

from nysync.models.people import Person

from nysync.models.nys_api import (
    ApiBill,
    ApiBillRef,
    ApiMember,
    ApiResponse,
    ApiVoteEvent,
)

from nysync.models.sync import (
    BillSyncOutcome,
    ErrorDetail,
    PartResult,
    SyncReport,
)

__all__ = [
    # Legislation
    "Bill",
    "Sponsor",
    "HistoryEntry",
    "RollCall",
    "MemberVote",
    # People
    "Person",
    # Upstream payloads
    "ApiBill",
    "ApiBillRef",
    "ApiMember",
    "ApiResponse",
    "ApiVoteEvent",
    # Sync results
    "BillSyncOutcome",
    "ErrorDetail",
    "PartResult",
    "SyncReport",
]
