"""Google Sheets connector using the gviz JSON query endpoint."""

import logging
from typing import Optional

import httpx

from sales_pulse.connectors.base import BaseConnector
from sales_pulse.errors import TransportError
from sales_pulse.models.raw import ParsedTable

from .constants import DEFAULT_GID, DEFAULT_SPREADSHEET_ID, SHEET_URL_TEMPLATE
from .parsers import EnvelopeStrategy, parse_payload

logger = logging.getLogger(__name__)


def build_sheet_url(spreadsheet_id: str = DEFAULT_SPREADSHEET_ID, gid: str = DEFAULT_GID) -> str:
    """gviz query URL for one tab of a spreadsheet, rendered as JSON."""
    return SHEET_URL_TEMPLATE.format(spreadsheet_id=spreadsheet_id, gid=gid)


class GvizConnector(BaseConnector):
    """
    Connector for a published Google Sheets tab.
    Issues a single GET per fetch; retrying is left to the caller's schedule.
    """

    source_id = "gviz"

    DEFAULT_HEADERS = {
        "User-Agent": "sales-pulse/0.1 (pipeline dashboard feed)",
        "Accept": "application/json, text/javascript, text/plain, */*",
    }

    def __init__(
        self,
        url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        envelope_strategy: EnvelopeStrategy = EnvelopeStrategy.FIRST_LAST,
    ):
        """
        Args:
            url: Full gviz query URL (default: the pipeline dashboard sheet)
            client: Optional httpx async client; closed by the caller if supplied
            timeout: Request timeout in seconds for the default client
            envelope_strategy: How to find the JSON inside the JSONP wrapper
        """
        self.url = url or build_sheet_url()
        self.envelope_strategy = envelope_strategy
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers=self.DEFAULT_HEADERS,
        )

    async def fetch(self) -> str:
        """GET the sheet and return the response body."""
        try:
            response = await self._client.get(self.url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.debug("Data source returned HTTP %d for %s", status, self.url)
            raise TransportError(f"Data sync failed: HTTP {status}", status_code=status, url=self.url) from e
        except httpx.RequestError as e:
            logger.debug("Request to %s failed: %r", self.url, e)
            raise TransportError(f"Data sync failed: {str(e) or type(e).__name__}", url=self.url) from e
        return response.text

    def parse(self, raw_text: str) -> ParsedTable:
        return parse_payload(raw_text, self.envelope_strategy)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
