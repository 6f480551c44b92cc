"""
Tests for the sync strategies: full backfill, incremental updates,
single-bill add/resync and batch resync.

Run: uv run pytest tests/test_strategies.py -v
"""
from datetime import datetime

import pytest

from nysync.ingestion.bill_updates import BillUpdatesIngester, unique_bill_refs
from nysync.ingestion.nys_client import NYSApiError
from nysync.ingestion.resync import BatchResyncIngester, BillNotFoundError, SingleBillSync
from nysync.ingestion.session_bills import SessionBillsIngester
from nysync.models.nys_api import ApiBillRef
from tests import payloads


def publish(fake_api, *print_nos, session=2025, listed=True):
    """Make bills available for detail lookups (and the listing)."""
    for print_no in print_nos:
        fake_api.add_bill(payloads.bill(
            print_no=print_no,
            session=session,
            title=f"An act relating to {print_no}",
            sponsor=payloads.member(full_name="Jane Doe", last_name="Doe", district=8),
            actions=[payloads.action("REFERRED TO RULES")],
        ))
    if listed:
        fake_api.listings.setdefault(session, []).extend(print_nos)


def strategy(cls, store, api, **kwargs):
    return cls(store=store, api=api, request_delay=0, **kwargs)


# ── Full backfill ────────────────────────────────────────────────────────────


class TestSessionBills:
    async def test_pages_through_listing(self, store, api, fake_api, people):
        publish(fake_api, "S1", "S2", "S3", "A4", "A5")
        ingester = strategy(SessionBillsIngester, store, api, page_delay=0)

        report = await ingester.run(2025, page_size=2)

        assert report.method == "full"
        assert (report.processed, report.inserted, report.updated, report.errors) == (5, 5, 0, 0)
        assert await store.bills.count_documents({"session_id": 2025}) == 5
        assert len(fake_api.paths("/api/3/bills/2025")) == 3 + 5

    async def test_max_bills(self, store, api, fake_api):
        publish(fake_api, *[f"S{n}" for n in range(1, 8)])
        ingester = strategy(SessionBillsIngester, store, api, page_delay=0)

        report = await ingester.run(2025, max_bills=3, page_size=5)

        assert report.processed == 3
        assert await store.bills.count_documents({}) == 3

    async def test_rerun_updates(self, store, api, fake_api):
        publish(fake_api, "S1", "S2")
        ingester = strategy(SessionBillsIngester, store, api, page_delay=0)
        await ingester.run(2025)

        report = await ingester.run(2025)

        assert (report.inserted, report.updated) == (0, 2)
        assert await store.bills.count_documents({}) == 2

    async def test_failed_bill_does_not_stop_run(self, store, api, fake_api):
        publish(fake_api, "S1", "S3")
        fake_api.listings[2025].insert(1, "S2")

        report = await strategy(SessionBillsIngester, store, api, page_delay=0).run(2025)

        assert (report.processed, report.inserted, report.errors) == (3, 2, 1)
        assert report.error_details[0].bill_number == "S2"
        assert "not found" in report.error_details[0].error

    async def test_error_details_capped(self, store, api, fake_api):
        fake_api.listings[2025] = [f"S{n}" for n in range(1, 13)]

        report = await strategy(SessionBillsIngester, store, api, page_delay=0).run(2025)

        assert report.errors == 12
        assert len(report.error_details) == 10
        assert report.success is True

    async def test_listing_failure_is_fatal(self, store, api, fake_api):
        fake_api.fail(r"^/bills/2025$", status_code=503)

        with pytest.raises(NYSApiError):
            await strategy(SessionBillsIngester, store, api, page_delay=0).run(2025)

    async def test_even_session_year(self, store, api, fake_api):
        publish(fake_api, "S1")
        report = await strategy(SessionBillsIngester, store, api, page_delay=0).run(2026)
        assert report.session_year == 2025
        assert report.processed == 1


# ── Incremental updates ──────────────────────────────────────────────────────


def fixed_now():
    return datetime(2025, 3, 4, 12, 30, 0, 123456)


class TestBillUpdates:
    def test_unique_refs_keep_order(self):
        refs = [ApiBillRef(base_print_no=p) for p in ("S2", "A1", "S2", "", "A1", "S9")]
        assert [r.base_print_no for r in unique_bill_refs(refs)] == ["S2", "A1", "S9"]

    def test_unique_refs_compare_normalized_numbers(self):
        refs = [ApiBillRef(base_print_no=p) for p in ("S256", "S00256", "s256", "A0100B", "A100B")]
        assert [r.base_print_no for r in unique_bill_refs(refs)] == ["S256", "A0100B"]

    async def test_syncs_each_bill_once(self, store, api, fake_api, people):
        publish(fake_api, "S1", "A2", listed=False)
        fake_api.updates = [payloads.update_item(p) for p in ("S1", "A2", "S1")]

        report = await strategy(BillUpdatesIngester, store, api, now=fixed_now).run(2025)

        assert report.method == "updates"
        assert (report.total_updates, report.unique_bills, report.processed) == (3, 2, 2)
        assert report.inserted == 2
        assert len(fake_api.paths("/api/3/bills/2025/S1")) == 1

    async def test_window(self, store, api, fake_api):
        await strategy(BillUpdatesIngester, store, api, now=fixed_now).run(2025)

        assert fake_api.paths("/api/3/bills/updates/") == [
            "/api/3/bills/updates/2025-03-03T12:30:00/2025-03-04T12:30:00"
        ]

    async def test_empty_feed_is_a_no_op(self, store, api, fake_api):
        report = await strategy(BillUpdatesIngester, store, api, now=fixed_now).run(2025)

        assert report.success is True
        assert report.processed == 0
        assert report.message == "No bill updates in the last 24 hours."

    async def test_failing_endpoint_is_a_no_op(self, store, api, fake_api):
        fake_api.fail(r"^/bills/updates/", status_code=500)

        report = await strategy(BillUpdatesIngester, store, api, now=fixed_now).run(2025)

        assert report.success is True
        assert report.errors == 0
        assert "unavailable" in report.message
        assert "HTTP 500" in report.message

    async def test_success_false_is_a_no_op(self, store, api, fake_api, monkeypatch):
        async def refuse(*args, **kwargs):
            raise NYSApiError("API Error: Invalid date range", api_message="Invalid date range")

        monkeypatch.setattr(api, "get_bill_updates", refuse)

        report = await strategy(BillUpdatesIngester, store, api, now=fixed_now).run(2025)

        assert report.success is True
        assert "Invalid date range" in report.message


# ── Single bill ──────────────────────────────────────────────────────────────


class TestSingleBill:
    async def test_add(self, store, api, fake_api, people):
        publish(fake_api, "S256", listed=False)

        outcome = await strategy(SingleBillSync, store, api).add("s00256", 2026)

        assert (outcome.bill_number, outcome.session_id) == ("S256", 2025)
        assert outcome.inserted is True
        assert outcome.title == "An act relating to S256"
        assert await store.sponsors.count_documents({"people_id": 42}) == 1

    async def test_add_unknown_bill_raises(self, store, api):
        with pytest.raises(NYSApiError):
            await strategy(SingleBillSync, store, api).add("S404", 2025)

    async def test_resync_requires_stored_bill(self, store, api, fake_api):
        publish(fake_api, "S256", listed=False)

        with pytest.raises(BillNotFoundError, match="S256"):
            await strategy(SingleBillSync, store, api).resync("S256", 2025)

    async def test_resync_rebuilds_children_only(self, store, api, fake_api, people):
        publish(fake_api, "S256", listed=False)
        await store.bills.insert_one({"bill_id": 55, "bill_number": "S256", "session_id": 2025, "title": "Stored"})
        await store.sponsors.insert_one({"bill_id": 55, "people_id": 7, "position": 1})

        outcome = await strategy(SingleBillSync, store, api).resync("S00256", 2025)

        assert outcome.bill_id == 55
        sponsors = await store.sponsors.find({"bill_id": 55}, {"_id": 0}).to_list(length=None)
        assert sponsors == [{"bill_id": 55, "people_id": 42, "position": 1}]
        assert (await store.find_bill("S256", 2025))["title"] == "Stored"


# ── Batch resync ─────────────────────────────────────────────────────────────


async def stored_bills(store, fake_api, *print_nos):
    publish(fake_api, *print_nos, listed=False)
    for i, print_no in enumerate(print_nos, start=1):
        await store.bills.insert_one({
            "bill_id": 2025_000_000 + i, "bill_number": print_no, "session_id": 2025, "title": "Stored",
        })


class TestBatchResync:
    async def test_pages_with_next_offset(self, store, api, fake_api, people):
        await stored_bills(store, fake_api, "S1", "S2", "S3")
        ingester = strategy(BatchResyncIngester, store, api)

        first = await ingester.run(2025, batch_size=2, offset=0)
        assert (first.processed, first.succeeded, first.total_bills) == (2, 2, 3)
        assert first.next_offset == 2
        assert first.has_more is True

        second = await ingester.run(2025, batch_size=2, offset=first.next_offset)
        assert second.processed == 1
        assert second.next_offset is None
        assert second.has_more is False
        assert await store.sponsors.count_documents({}) == 3

    async def test_does_not_touch_bill_rows(self, store, api, fake_api, people):
        await stored_bills(store, fake_api, "S1")
        report = await strategy(BatchResyncIngester, store, api).run(2025)

        assert (report.inserted, report.updated) == (0, 0)
        assert (await store.find_bill("S1", 2025))["title"] == "Stored"

    async def test_time_budget(self, store, api, fake_api):
        await stored_bills(store, fake_api, "S1", "S2", "S3")
        ticks = iter([0.0, 1.0, 20.0, 30.0])
        ingester = strategy(BatchResyncIngester, store, api, time_budget=10, clock=lambda: next(ticks))

        report = await ingester.run(2025, batch_size=3)

        assert report.processed == 1
        assert report.next_offset == 1
        assert report.has_more is True

    async def test_empty_range(self, store, api, fake_api):
        await stored_bills(store, fake_api, "S1")
        report = await strategy(BatchResyncIngester, store, api).run(2025, offset=10)

        assert report.processed == 0
        assert report.message == "No bills to resync in this range"
        assert report.has_more is False

    async def test_upstream_failure_recorded(self, store, api, fake_api):
        await stored_bills(store, fake_api, "S1", "S2")
        fake_api.fail(r"/bills/2025/S2$", status_code=502)

        report = await strategy(BatchResyncIngester, store, api).run(2025)

        assert (report.processed, report.succeeded, report.errors) == (2, 1, 1)
        assert report.error_details[0].bill_number == "S2"

    async def test_response_keys(self, store, api, fake_api):
        await stored_bills(store, fake_api, "S1")
        response = (await strategy(BatchResyncIngester, store, api).run(2025)).to_response()

        assert response["nextOffset"] is None
        assert response["hasMore"] is False
        assert response["totalBills"] == 1
        assert response["errorDetails"] == []
        assert response["duration"].endswith("s")
