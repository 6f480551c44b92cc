"""
Tests for sponsor, history and vote syncing.

Run: uv run pytest tests/test_child_records.py -v
"""
from datetime import date

import pytest

from nysync.ingestion.child_records import ChildRecordSyncer, roll_call_id_for
from nysync.models.nys_api import ApiBill
from tests import payloads

BILL_ID = 2025_000_256


@pytest.fixture
def syncer(store, context):
    return ChildRecordSyncer(store, context.matcher)


def api_bill(**kwargs) -> ApiBill:
    return ApiBill.model_validate(payloads.bill(**kwargs))


async def rows(collection, **query):
    return await collection.find(query, {"_id": 0}).to_list(length=None)


# ── Sponsors ─────────────────────────────────────────────────────────────────


class TestSponsors:
    async def test_positions(self, store, people, syncer):
        bill = api_bill(
            sponsor=payloads.member(full_name="Jane Doe", last_name="Doe", district=8),
            co_sponsors=[
                payloads.member(full_name="Robert Jackson"),
                payloads.member(full_name="Jessica Ramos"),
            ],
            multi_sponsors=[payloads.member(full_name="Deborah Glick", chamber="ASSEMBLY")],
        )
        assert await syncer.sync_sponsors(bill, BILL_ID) == 4

        stored = sorted(await rows(store.sponsors, bill_id=BILL_ID), key=lambda r: r["position"])
        assert [(r["people_id"], r["position"]) for r in stored] == [(42, 1), (7, 2), (11, 3), (75, 4)]

    async def test_unmatched_members_are_dropped(self, store, people, syncer):
        bill = api_bill(
            sponsor=payloads.member(full_name="Jane Doe", last_name="Doe", district=8),
            co_sponsors=[
                payloads.member(full_name="Unknown Person", last_name="Person", district=50),
                payloads.member(full_name="Jessica Ramos"),
            ],
        )
        assert await syncer.sync_sponsors(bill, BILL_ID) == 2

        stored = await rows(store.sponsors, bill_id=BILL_ID)
        assert {r["people_id"] for r in stored} == {42, 11}
        assert await store.people.count_documents({}) == len(people)

    async def test_multi_sponsors_follow_co_sponsor_slots(self, store, people, syncer):
        bill = api_bill(
            sponsor=payloads.member(full_name="Jane Doe", last_name="Doe", district=8),
            co_sponsors=[
                payloads.member(full_name="Unknown Person", last_name="Person", district=50),
                payloads.member(full_name="Robert Jackson"),
            ],
            multi_sponsors=[payloads.member(full_name="Deborah Glick", chamber="ASSEMBLY")],
        )
        await syncer.sync_sponsors(bill, BILL_ID)

        stored = sorted(await rows(store.sponsors, bill_id=BILL_ID), key=lambda r: r["position"])
        assert [(r["people_id"], r["position"]) for r in stored] == [(42, 1), (7, 3), (75, 4)]

    async def test_people_id_zero_is_kept(self, store):
        class ZeroMatcher:
            async def match(self, member):
                return 0 if member is not None else None

        bill = api_bill(sponsor=payloads.member(full_name="Jane Doe"))
        assert await ChildRecordSyncer(store, ZeroMatcher()).sync_sponsors(bill, BILL_ID) == 1

        stored = await rows(store.sponsors, bill_id=BILL_ID)
        assert [(r["people_id"], r["position"]) for r in stored] == [(0, 1)]

    async def test_replaces_previous_set(self, store, people, syncer):
        await store.sponsors.insert_many([
            {"bill_id": BILL_ID, "people_id": 7, "position": 1},
            {"bill_id": BILL_ID, "people_id": 11, "position": 2},
        ])
        bill = api_bill(sponsor=payloads.member(full_name="Jane Doe"))
        await syncer.sync_sponsors(bill, BILL_ID)

        stored = await rows(store.sponsors, bill_id=BILL_ID)
        assert [(r["people_id"], r["position"]) for r in stored] == [(42, 1)]

    async def test_other_bills_untouched(self, store, people, syncer):
        await store.sponsors.insert_one({"bill_id": 1, "people_id": 7, "position": 1})
        await syncer.sync_sponsors(api_bill(sponsor=payloads.member(full_name="Jane Doe")), BILL_ID)
        assert await store.sponsors.count_documents({"bill_id": 1}) == 1


# ── History ──────────────────────────────────────────────────────────────────


class TestHistory:
    async def test_latest_amendment_wins(self, store, syncer):
        bill = api_bill(
            amendments={
                "": [payloads.action("REFERRED TO EDUCATION", sequence=1)],
                "A": [
                    payloads.action("REFERRED TO EDUCATION", sequence=1),
                    payloads.action("AMEND AND RECOMMIT TO EDUCATION", date="2025-02-01", sequence=2),
                ],
            },
            actions=[payloads.action("BILL LEVEL ACTION")],
        )
        assert await syncer.sync_history(bill, BILL_ID) == 2

        stored = sorted(await rows(store.history, bill_id=BILL_ID), key=lambda r: r["sequence"])
        assert [r["action"] for r in stored] == [
            "REFERRED TO EDUCATION", "AMEND AND RECOMMIT TO EDUCATION",
        ]
        assert stored[1]["date"] == "2025-02-01"
        assert stored[0]["chamber"] == "Senate"

    async def test_falls_back_to_bill_actions(self, store, syncer):
        bill = api_bill(
            amendments={"": []},
            actions=[payloads.action("REFERRED TO CODES", chamber="ASSEMBLY")],
        )
        assert await syncer.sync_history(bill, BILL_ID) == 1

        stored = await rows(store.history, bill_id=BILL_ID)
        assert stored[0]["action"] == "REFERRED TO CODES"
        assert stored[0]["chamber"] == "Assembly"

    async def test_description_and_date_fallbacks(self, store, syncer):
        bill = api_bill(actions=[{"sequenceNo": 1, "description": "PRINT NUMBER 256A", "chamber": "SENATE"}])
        await syncer.sync_history(bill, BILL_ID)

        stored = await rows(store.history, bill_id=BILL_ID)
        assert stored[0]["action"] == "PRINT NUMBER 256A"
        assert stored[0]["date"] == date.today().isoformat()

    async def test_empty_actions_preserve_rows(self, store, syncer):
        await store.history.insert_many([
            {"bill_id": BILL_ID, "date": "2025-01-08", "sequence": 1, "action": "REFERRED", "chamber": "Senate"},
            {"bill_id": BILL_ID, "date": "2025-01-09", "sequence": 2, "action": "REPORTED", "chamber": "Senate"},
        ])
        assert await syncer.sync_history(api_bill(), BILL_ID) is None
        assert await store.history.count_documents({"bill_id": BILL_ID}) == 2

    async def test_resync_replaces(self, store, syncer):
        bill = api_bill(actions=[payloads.action("ONE", sequence=1), payloads.action("TWO", sequence=2)])
        await syncer.sync_history(bill, BILL_ID)
        await syncer.sync_history(bill, BILL_ID)
        assert await store.history.count_documents({"bill_id": BILL_ID}) == 2


# ── Votes ────────────────────────────────────────────────────────────────────


def floor_vote(**kwargs):
    return payloads.vote_event({
        "AYE": [payloads.member(full_name="Jane Doe"), payloads.member(full_name="Robert Jackson")],
        "NAY": [payloads.member(full_name="Jessica Ramos")],
        "EXC": [payloads.member(full_name="Jabari Brisport")],
        "ABSENT": [payloads.member(full_name="Someone Unknown", last_name="Unknown", district=61)],
    }, **kwargs)


class TestVotes:
    async def test_roll_call_counts(self, store, people, syncer):
        bill = api_bill(votes=[floor_vote(description="Third reading")])
        assert await syncer.sync_votes(bill, BILL_ID) == 1

        roll_call = await store.roll_calls.find_one({"bill_id": BILL_ID}, {"_id": 0})
        assert roll_call["roll_call_id"] == roll_call_id_for(BILL_ID, 1) == BILL_ID * 100 + 1
        assert (roll_call["yea"], roll_call["nay"], roll_call["absent"], roll_call["nv"]) == (2, 1, 1, 1)
        assert roll_call["total"] == 5
        assert roll_call["chamber"] == "Senate"
        assert roll_call["description"] == "Third reading"

    async def test_member_votes(self, store, people, syncer):
        await syncer.sync_votes(api_bill(votes=[floor_vote()]), BILL_ID)

        votes = {v["people_id"]: (v["vote"], v["vote_desc"]) for v in await rows(store.votes)}
        assert votes == {42: (1, "Yea"), 7: (1, "Yea"), 11: (2, "Nay"), 23: (4, "NV")}

    async def test_positional_ids(self, store, people, syncer):
        bill = api_bill(votes=[floor_vote(date="2025-03-04"), floor_vote(date="2025-05-01")])
        assert await syncer.sync_votes(bill, BILL_ID) == 2
        assert sorted(await store.roll_call_ids_for_bill(BILL_ID)) == [BILL_ID * 100 + 1, BILL_ID * 100 + 2]

    async def test_committee_chamber_preferred(self, store, people, syncer):
        event = floor_vote(vote_type="COMMITTEE", chamber="SENATE")
        event["committee"] = {"name": "Codes", "chamber": "ASSEMBLY"}
        await syncer.sync_votes(api_bill(votes=[event]), BILL_ID)

        roll_call = await store.roll_calls.find_one({"bill_id": BILL_ID})
        assert roll_call["chamber"] == "Assembly"
        assert roll_call["description"] == "COMMITTEE"

    async def test_resync_replaces_roll_calls(self, store, people, syncer):
        await syncer.sync_votes(api_bill(votes=[floor_vote(), floor_vote()]), BILL_ID)
        await syncer.sync_votes(api_bill(votes=[floor_vote()]), BILL_ID)

        assert await store.roll_calls.count_documents({"bill_id": BILL_ID}) == 1
        assert await store.votes.count_documents({"roll_call_id": BILL_ID * 100 + 2}) == 0
        assert await store.votes.count_documents({}) == 4

    async def test_empty_votes_preserve_rows(self, store, people, syncer):
        await syncer.sync_votes(api_bill(votes=[floor_vote()]), BILL_ID)

        assert await syncer.sync_votes(api_bill(votes=[]), BILL_ID) is None
        assert await store.roll_calls.count_documents({"bill_id": BILL_ID}) == 1
        assert await store.votes.count_documents({}) == 4
