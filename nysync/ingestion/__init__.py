"""Ingestion module - API client, matching, upserts and sync strategies."""

from nysync.ingestion.nys_client import NYSLegislationClient, NYSApiError, UpstreamError
from nysync.ingestion.person_matcher import PeopleCache, PersonMatcher, SyncContext
from nysync.ingestion.bill_upsert import BillUpserter, InvalidBillError
from nysync.ingestion.session_bills import SessionBillsIngester
from nysync.ingestion.bill_updates import BillUpdatesIngester
from nysync.ingestion.resync import BatchResyncIngester, BillNotFoundError, SingleBillSync
from nysync.ingestion.diagnostics import SyncDiagnostics, diagnose_sync

__all__ = [
    "NYSLegislationClient",
    "NYSApiError",
    "UpstreamError",
    "PeopleCache",
    "PersonMatcher",
    "SyncContext",
    "BillUpserter",
    "InvalidBillError",
    "SessionBillsIngester",
    "BillUpdatesIngester",
    "BatchResyncIngester",
    "BillNotFoundError",
    "SingleBillSync",
    "SyncDiagnostics",
    "diagnose_sync",
]
