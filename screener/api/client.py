"""Async HTTP client for the screener backend.

Wraps the two endpoints the workspace depends on:

- GET  /metadata/indicators -- indicator catalog
- POST /filters/apply       -- one page of matching companies

Every failure (non-2xx status, timeout, connection error, undecodable
body) is raised as ``ScanRequestError`` with a user-presentable message;
callers do not need to distinguish between them.
"""

import logging
from typing import Any, Optional

import httpx

from config.settings import ApiConfig

logger = logging.getLogger(__name__)

_FALLBACK_MESSAGE = "Request failed"


class ScanRequestError(Exception):
    """A backend call failed.

    Attributes:
        message: Response body text or transport failure description
        status_code: HTTP status when a response was received
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message or _FALLBACK_MESSAGE
        self.status_code = status_code
        super().__init__(self.message)


class ScreenerApiClient:
    """HTTP client wrapping the screener backend API.

    The client owns an ``httpx.AsyncClient``; pass ``transport`` to stub
    the network (e.g. ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        config: Optional[ApiConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the API client.

        Args:
            config: API configuration (defaults from environment)
            transport: Optional custom httpx transport
        """
        self.config = config or ApiConfig()
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout, connect=self.config.connect_timeout),
            transport=transport,
        )
        logger.info("ScreenerApiClient initialized: base_url=%s", self.config.base_url)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ScreenerApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, url: str, json_body: Optional[dict] = None) -> Any:
        """Send a request and return parsed JSON.

        Raises:
            ScanRequestError: On any transport or status failure
        """
        logger.debug("%s %s", method, url)
        try:
            response = await self._http.request(method, url, json=json_body)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ScanRequestError(str(exc)) from exc

        if not response.is_success:
            logger.warning("%s %s returned %d", method, url, response.status_code)
            raise ScanRequestError(response.text, status_code=response.status_code)

        try:
            return response.json() if response.content else {}
        except ValueError as exc:
            raise ScanRequestError(f"Invalid JSON response: {exc}", response.status_code) from exc

    # ------------------------------------------------------------------
    # Indicator catalog
    # ------------------------------------------------------------------

    async def get_indicators(self) -> list[dict]:
        """Fetch the indicator catalog.

        Returns:
            List of ``{"key", "label"?}`` dicts
        """
        data = await self._request("GET", self.config.indicators_url)
        indicators = (data.get("indicators") or []) if isinstance(data, dict) else []
        logger.debug("Fetched %d indicators", len(indicators))
        return indicators

    # ------------------------------------------------------------------
    # Filter matching
    # ------------------------------------------------------------------

    async def apply_filters(self, payload: dict) -> list[dict]:
        """Request one page of companies matching the filters.

        Args:
            payload: Request body (see ``ScanRequest.to_payload``)

        Returns:
            The page's company rows, possibly empty
        """
        data = await self._request("POST", self.config.apply_filters_url, json_body=payload)
        rows = (data.get("companies") or []) if isinstance(data, dict) else []
        logger.debug(
            "Fetched %d companies (offset=%s, limit=%s)",
            len(rows), payload.get("offset"), payload.get("limit"),
        )
        return rows
