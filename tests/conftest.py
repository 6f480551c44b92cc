"""
Shared fixtures: an in-memory MongoDB (mongomock-motor) behind BillStore and
a fake legislation API served through httpx.MockTransport.
"""
import re
from typing import Dict, List, Optional, Tuple

import httpx
import pytest
from mongomock_motor import AsyncMongoMockClient

from nysync.database.normalization import normalize_bill_number
from nysync.database.store import BillStore
from nysync.ingestion.nys_client import NYSLegislationClient
from nysync.ingestion.person_matcher import SyncContext
from tests import payloads

TEST_API_KEY = "test-key-0123456789"

# Senate and Assembly members used by most tests
PEOPLE = [
    {"people_id": 42, "name": "Jane Doe", "first_name": "Jane", "last_name": "Doe", "district": "SD-008"},
    {"people_id": 7, "name": "Robert Jackson", "first_name": "Robert", "last_name": "Jackson", "district": "SD-031"},
    {"people_id": 11, "name": "Jessica Ramos", "first_name": "Jessica", "last_name": "Ramos", "district": "SD-013"},
    {"people_id": 23, "name": "Jabari Brisport", "first_name": "Jabari", "last_name": "Brisport", "district": "SD-025"},
    {"people_id": 75, "name": "Deborah Glick", "first_name": "Deborah", "last_name": "Glick", "district": "HD-066"},
]


class FakeNYSApi:
    """
    Minimal stand-in for the Open Legislation API.

    Bills are keyed by (session, normalized print number). Any path can be
    forced to fail with a status code via `fail`.
    """

    def __init__(self):
        self.bills: Dict[Tuple[int, str], dict] = {}
        self.listings: Dict[int, List[str]] = {}
        self.updates: List[dict] = []
        self.failures: Dict[str, Tuple[int, str]] = {}
        self.requests: List[httpx.Request] = []

    def add_bill(self, payload: dict, session: Optional[int] = None):
        session = session or payload["session"]
        self.bills[(session, normalize_bill_number(payload["basePrintNo"]))] = payload
        return payload

    def fail(self, pattern: str, status_code: int = 500, body: str = "Internal Server Error"):
        """Make every request whose path matches `pattern` fail."""
        self.failures[pattern] = (status_code, body)

    def paths(self, prefix: str = "") -> List[str]:
        return [r.url.path for r in self.requests if r.url.path.startswith(prefix)]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.replace("/api/3", "", 1)

        for pattern, (status_code, body) in self.failures.items():
            if re.search(pattern, path):
                return httpx.Response(status_code, text=body)

        params = request.url.params
        if path.startswith("/bills/updates/"):
            limit = int(params.get("limit", 1000))
            items = self.updates[:limit]
            return httpx.Response(200, json=payloads.envelope({"items": items, "size": len(items)}))

        match = re.fullmatch(r"/bills/(\d{4})/search", path)
        if match:
            print_nos = self.listings.get(int(match.group(1)), [])[:3]
            return httpx.Response(200, json=payloads.envelope(payloads.listing(print_nos)))

        match = re.fullmatch(r"/bills/(\d{4})/([^/]+)", path)
        if match:
            key = (int(match.group(1)), normalize_bill_number(match.group(2)))
            if key not in self.bills:
                return httpx.Response(200, json=payloads.envelope(
                    None, success=False, message=f"Bill {match.group(2)} not found"
                ))
            return httpx.Response(200, json=payloads.envelope(self.bills[key]))

        match = re.fullmatch(r"/bills/(\d{4})", path)
        if match:
            session = int(match.group(1))
            all_bills = self.listings.get(session, [])
            offset = int(params.get("offset", 0))
            limit = int(params.get("limit", 100))
            page = all_bills[offset:offset + limit]
            return httpx.Response(200, json=payloads.envelope(
                payloads.listing(page, session=session, total=len(all_bills))
            ))

        return httpx.Response(404, text="Not Found")


@pytest.fixture
def db():
    client = AsyncMongoMockClient()
    return client["nysync_test"]


@pytest.fixture
def store(db):
    return BillStore(db)


@pytest.fixture
async def people(store):
    """Seed the default people roster."""
    await store.people.insert_many([dict(p) for p in PEOPLE])
    return PEOPLE


@pytest.fixture
def fake_api():
    return FakeNYSApi()


@pytest.fixture
async def api(fake_api):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handle))
    client = NYSLegislationClient(api_key=TEST_API_KEY, http_client=http_client)
    yield client
    await http_client.aclose()


@pytest.fixture
def context(store):
    return SyncContext(store)
