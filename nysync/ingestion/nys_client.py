"""
NYS Open Legislation API client.

Handles fetching bill data from the NYS Senate Open Legislation API.
API Docs: https://legislation.nysenate.gov/static/docs/html/

Every response is an envelope {"success": ..., "message": ..., "result": ...};
success=false is an error even when the HTTP status is 200.
"""
import logging
from datetime import datetime
from typing import List, Optional, Tuple

import httpx
from pydantic import ValidationError

from nysync.config import settings, NYS_API_BASE_URL
from nysync.models.nys_api import ApiBill, ApiBillRef, ApiResponse

logger = logging.getLogger(__name__)

UPDATE_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


class UpstreamError(RuntimeError):
    """Base class for failures talking to the legislation API."""


class NYSApiError(UpstreamError):
    """
    The API answered with a non-2xx status or success=false.

    Attributes:
        status_code: HTTP status, if the failure was at the HTTP level
        api_message: the API's own message for success=false responses
    """

    def __init__(self, message: str, status_code: Optional[int] = None,
                 api_message: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.api_message = api_message


class NYSLegislationClient:
    """
    Async client for the NYS Open Legislation API.

    Usage:
        async with NYSLegislationClient() as client:
            bill = await client.get_bill(2025, "S256")

    Args:
        api_key: API key (defaults to settings.NYS_LEGISLATION_API_KEY)
        http_client: Pre-built httpx.AsyncClient; the caller keeps ownership
        base_url: API root
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = NYS_API_BASE_URL,
    ):
        self.api_key = api_key if api_key is not None else settings.NYS_LEGISLATION_API_KEY
        self.base_url = base_url.rstrip("/")
        self._client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> "NYSLegislationClient":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
            self._owns_client = True
        return self._client

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def redact(self, text: str) -> str:
        """Remove the API key from anything about to be logged."""
        if self.api_key:
            return text.replace(self.api_key, "REDACTED")
        return text

    # ------------------------------------------------------------------
    # Low-level requests
    # ------------------------------------------------------------------

    async def get_raw(self, path: str, params: Optional[dict] = None,
                      with_key: bool = True) -> httpx.Response:
        """
        GET an endpoint and return the raw response without checking it.

        Used by diagnostics, which wants to see the status and body of
        failures rather than an exception.
        """
        request_params = dict(params or {})
        if with_key:
            request_params["key"] = self.api_key
        return await self.http.get(self.url(path), params=request_params)

    async def _request(self, path: str, params: Optional[dict] = None) -> ApiResponse:
        """
        Make a request and unwrap the response envelope.

        Raises:
            NYSApiError: non-2xx status, a non-JSON body, or success=false
        """
        response = await self.get_raw(path, params)
        logger.debug(f"GET {self.redact(str(response.request.url))} -> {response.status_code}")

        if response.status_code >= 400:
            raise NYSApiError(f"NYS API error: HTTP {response.status_code}",
                              status_code=response.status_code)

        try:
            envelope = ApiResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise NYSApiError(f"Unreadable NYS API response: {e}",
                              status_code=response.status_code) from e

        if not envelope.success:
            raise NYSApiError(
                f"API Error: {envelope.message or 'Unknown error'}",
                status_code=response.status_code,
                api_message=envelope.message,
            )
        return envelope

    # ------------------------------------------------------------------
    # Bills
    # ------------------------------------------------------------------

    async def get_bill(self, session_year: int, print_no: str) -> ApiBill:
        """
        Get full detail for one bill.

        Args:
            session_year: Session year (odd)
            print_no: Bill print number (e.g., "S256")

        Returns:
            Parsed bill payload

        Raises:
            NYSApiError: if the API fails or returns no usable bill
        """
        envelope = await self._request(f"/bills/{session_year}/{print_no}")
        if not isinstance(envelope.result, dict):
            raise NYSApiError(f"Invalid bill data for {print_no}: missing result")
        try:
            return ApiBill.model_validate(envelope.result)
        except ValidationError as e:
            raise NYSApiError(f"Invalid bill data for {print_no}: {e}") from e

    async def list_bills(
        self,
        session_year: int,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[List[ApiBillRef], int]:
        """
        One page of the session bill listing.

        Returns:
            (bill references, total reported by the API)
        """
        envelope = await self._request(
            f"/bills/{session_year}", {"limit": limit, "offset": offset}
        )
        refs = [ApiBillRef.model_validate(item) for item in envelope.items
                if isinstance(item, dict)]
        return refs, envelope.total

    async def get_bill_updates(
        self,
        from_time: datetime,
        to_time: datetime,
        limit: int = 1000,
    ) -> List[ApiBillRef]:
        """
        Bills changed in a time window.

        The updates endpoint is not scoped by session.
        """
        path = (
            f"/bills/updates/{from_time.strftime(UPDATE_TIMESTAMP_FORMAT)}"
            f"/{to_time.strftime(UPDATE_TIMESTAMP_FORMAT)}"
        )
        envelope = await self._request(path, {"limit": limit})
        return [ApiBillRef.from_update(item) for item in envelope.items
                if isinstance(item, dict)]
