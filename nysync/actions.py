"""
Dispatch-by-action entry point.

A scheduler or admin tool posts a JSON body such as
{"action": "resync", "sessionYear": 2025, "batchSize": 50, "offset": 0}
and gets back a status code plus the JSON report.
"""
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from nysync.config import (
    ConfigurationError,
    current_session_year,
    normalize_session_year,
    settings,
)
from nysync.database.store import BillStore
from nysync.ingestion.bill_updates import BillUpdatesIngester
from nysync.ingestion.diagnostics import diagnose_sync
from nysync.ingestion.nys_client import NYSLegislationClient
from nysync.ingestion.resync import BatchResyncIngester, BillNotFoundError, SingleBillSync
from nysync.ingestion.session_bills import SessionBillsIngester

logger = logging.getLogger(__name__)


class ActionRequest(BaseModel):
    """Request body. Unknown keys are ignored."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    action: Optional[str] = None
    session_year: Optional[int] = None
    bill_number: Optional[str] = None
    batch_size: Optional[int] = Field(default=None, gt=0)
    offset: int = Field(default=0, ge=0)
    max_bills: Optional[int] = Field(default=None, ge=0)

    @property
    def session(self) -> int:
        return normalize_session_year(self.session_year or current_session_year())


class ActionResponse(BaseModel):
    status_code: int = 200
    body: Dict[str, Any] = Field(default_factory=dict)


class BadRequest(ValueError):
    """The request can't be served as given (400)."""


Collaborators = Dict[str, Any]
Handler = Callable[[ActionRequest, Collaborators], Awaitable[Dict[str, Any]]]


async def _sync_bills(request: ActionRequest, deps: Collaborators) -> Dict[str, Any]:
    report = await BillUpdatesIngester(**deps).run(request.session)
    return report.to_response()


async def _full_sync(request: ActionRequest, deps: Collaborators) -> Dict[str, Any]:
    report = await SessionBillsIngester(**deps).run(request.session, max_bills=request.max_bills)
    return report.to_response()


async def _resync(request: ActionRequest, deps: Collaborators) -> Dict[str, Any]:
    report = await BatchResyncIngester(**deps).run(
        request.session, batch_size=request.batch_size, offset=request.offset
    )
    return report.to_response()


def _require_bill_number(request: ActionRequest) -> str:
    if not request.bill_number or not request.bill_number.strip():
        raise BadRequest(f"billNumber is required for {request.action}")
    return request.bill_number


async def _add_bill(request: ActionRequest, deps: Collaborators) -> Dict[str, Any]:
    bill_number = _require_bill_number(request)
    outcome = await SingleBillSync(**deps).add(bill_number, request.session)
    body = {
        "success": True,
        "billNumber": outcome.bill_number,
        "sessionYear": outcome.session_id,
        "title": outcome.title,
        "inserted": outcome.inserted,
        "updated": outcome.updated,
    }
    if outcome.degraded:
        body["failedParts"] = outcome.failed_parts
    return body


async def _resync_bill(request: ActionRequest, deps: Collaborators) -> Dict[str, Any]:
    bill_number = _require_bill_number(request)
    outcome = await SingleBillSync(**deps).resync(bill_number, request.session)
    body = {
        "success": True,
        "billNumber": outcome.bill_number,
        "sessionYear": outcome.session_id,
        "billId": outcome.bill_id,
        "message": "Resynced",
    }
    if outcome.degraded:
        body["failedParts"] = outcome.failed_parts
    return body


async def _diagnose_sync(request: ActionRequest, deps: Collaborators) -> Dict[str, Any]:
    return await diagnose_sync(request.session, api=deps.get("api"))


ACTIONS: Dict[str, Handler] = {
    "sync-bills": _sync_bills,
    "full-sync": _full_sync,
    "resync": _resync,
    "add-bill": _add_bill,
    "resync-bill": _resync_bill,
    "diagnose-sync": _diagnose_sync,
}


def _error(status_code: int, message: str) -> ActionResponse:
    return ActionResponse(status_code=status_code, body={"success": False, "error": message})


async def dispatch(
    body: Dict[str, Any],
    store: Optional[BillStore] = None,
    api: Optional[NYSLegislationClient] = None,
    request_delay: Optional[float] = None,
) -> ActionResponse:
    """
    Run the action named in a request body.

    Args:
        body: Request JSON
        store: Data-access layer (built from settings when omitted)
        api: NYS API client (built from settings when omitted)
        request_delay: Override for the per-bill delay

    Returns:
        200 with the report, 400 for a bad request or unknown bill,
        500 for missing configuration or an unexpected failure
    """
    try:
        request = ActionRequest.model_validate(body or {})
    except ValidationError as e:
        return _error(400, f"Invalid request: {e.errors()[0].get('msg')}")

    handler = ACTIONS.get(request.action or "")
    if handler is None:
        return _error(400, f"Unknown action: {request.action}")

    deps: Collaborators = {"store": store, "api": api, "request_delay": request_delay}
    logger.info(f"{settings.APP_NAME}: running action {request.action}")

    try:
        return ActionResponse(body=await handler(request, deps))
    except (BadRequest, BillNotFoundError) as e:
        logger.warning(f"Rejected {request.action}: {e}")
        return _error(400, str(e))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return _error(500, str(e))
    except Exception as e:
        logger.exception(f"Action {request.action} failed: {e}")
        return _error(500, str(e))
