"""
Read-only probes of the legislation API.

Used when the scheduled sync reports nothing for a while: each probe hits
one endpoint the sync depends on and records what came back. Probes are
independent, so one failure never hides the others. Nothing is written.
"""
import json
import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from nysync.config.constants import (
    DIAGNOSTIC_HIGH_BILL,
    DIAGNOSTIC_KNOWN_BILL,
    DIAGNOSTIC_PRIOR_SESSION,
    UPDATE_WINDOW_HOURS,
    normalize_session_year,
)
from nysync.config.settings import settings
from nysync.ingestion.nys_client import UPDATE_TIMESTAMP_FORMAT, NYSLegislationClient

logger = logging.getLogger(__name__)

RAW_BODY_EXCERPT = 300
TITLE_EXCERPT = 80

Probe = Callable[[], Awaitable[Dict[str, Any]]]


def _summarize(response: httpx.Response, summary: Callable[[dict], Dict[str, Any]]) -> Dict[str, Any]:
    """Status plus whatever the body tells us; raw excerpt if it isn't JSON."""
    result: Dict[str, Any] = {"status": response.status_code, "ok": response.is_success}
    try:
        data = json.loads(response.text)
    except ValueError:
        result["raw_body"] = response.text[:RAW_BODY_EXCERPT]
        return result

    if not isinstance(data, dict):
        result["raw_body"] = response.text[:RAW_BODY_EXCERPT]
        return result

    result["success"] = data.get("success")
    result.update(summary(data))
    if not data.get("success"):
        result["message"] = data.get("message")
    return result


def _bill_summary(data: dict) -> Dict[str, Any]:
    result = data.get("result") or {}
    title = result.get("title") if isinstance(result, dict) else None
    return {
        "bill_title": title[:TITLE_EXCERPT] if title else None,
        "response_type": data.get("responseType"),
    }


def _listing_summary(data: dict) -> Dict[str, Any]:
    result = data.get("result")
    if not isinstance(result, dict):
        result = {}
    items = result.get("items") or []
    return {
        "total_items": result.get("size") or result.get("total") or data.get("total") or 0,
        "item_count": len(items),
        "first_item": items[0].get("basePrintNo") if items and isinstance(items[0], dict) else None,
    }


class SyncDiagnostics:
    """
    Run every probe for a session and collect the results.

    Args:
        api: NYS API client (diagnostics never needs the store)
        now: Clock for the updates window
    """

    def __init__(self, api: NYSLegislationClient,
                 now: Optional[Callable[[], datetime]] = None):
        self.api = api
        self.now = now or datetime.utcnow

    async def run(self, session_year: int) -> Dict[str, Any]:
        session_year = normalize_session_year(session_year)
        key = self.api.api_key
        report: Dict[str, Any] = {
            "session_year": session_year,
            "api_key_present": bool(key),
            "api_key_prefix": f"{key[:4]}..." if key else None,
            "timestamp": self.now().isoformat(),
            "tests": {},
        }

        probes: Dict[str, Probe] = {
            "api_reachable": lambda: self._reachable(session_year),
            "direct_lookup_s1": lambda: self._bill(session_year, DIAGNOSTIC_KNOWN_BILL),
            "direct_lookup_high": lambda: self._bill(session_year, DIAGNOSTIC_HIGH_BILL),
            "bills_listing": lambda: self._listing(session_year),
            "updates_endpoint": self._updates,
            "search_endpoint": lambda: self._search(session_year),
            "direct_lookup_prior_session": lambda: self._bill(
                DIAGNOSTIC_PRIOR_SESSION, DIAGNOSTIC_KNOWN_BILL
            ),
        }

        for name, probe in probes.items():
            try:
                report["tests"][name] = await probe()
            except Exception as e:
                logger.warning(f"Diagnostic probe {name} failed: {e}")
                report["tests"][name] = {"error": str(e)}

        return report

    async def _reachable(self, session_year: int) -> Dict[str, Any]:
        """Unauthenticated request: any HTTP status means the API is up."""
        try:
            response = await self.api.get_raw(
                f"/bills/{session_year}/{DIAGNOSTIC_KNOWN_BILL}", with_key=False
            )
        except httpx.HTTPError as e:
            return {"reachable": False, "error": str(e)}
        return {"reachable": True, "status": response.status_code}

    async def _bill(self, session_year: int, print_no: str) -> Dict[str, Any]:
        response = await self.api.get_raw(f"/bills/{session_year}/{print_no}")
        return _summarize(response, _bill_summary)

    async def _listing(self, session_year: int) -> Dict[str, Any]:
        response = await self.api.get_raw(f"/bills/{session_year}", {"limit": 3, "offset": 0})
        return _summarize(response, _listing_summary)

    async def _updates(self) -> Dict[str, Any]:
        to_time = self.now()
        from_time = to_time - timedelta(hours=UPDATE_WINDOW_HOURS)
        from_str = from_time.strftime(UPDATE_TIMESTAMP_FORMAT)
        to_str = to_time.strftime(UPDATE_TIMESTAMP_FORMAT)
        response = await self.api.get_raw(f"/bills/updates/{from_str}/{to_str}", {"limit": 5})
        result = _summarize(response, _listing_summary)
        result.update({"from": from_str, "to": to_str})
        return result

    async def _search(self, session_year: int) -> Dict[str, Any]:
        response = await self.api.get_raw(
            f"/bills/{session_year}/search", {"term": "*", "limit": 3}
        )
        return _summarize(response, _listing_summary)


async def diagnose_sync(session_year: int, api: Optional[NYSLegislationClient] = None) -> Dict[str, Any]:
    """
    Probe every endpoint the sync depends on.

    Args:
        session_year: Session to probe; even years map to the prior odd year
        api: Client to use (one is created and closed when omitted)

    Returns:
        Report dict with one entry per probe under "tests"

    Raises:
        ConfigurationError: if no client is given and the API key is missing
    """
    if api is not None:
        return await SyncDiagnostics(api).run(session_year)
    settings.require("NYS_LEGISLATION_API_KEY")
    async with NYSLegislationClient() as client:
        return await SyncDiagnostics(client).run(session_year)
