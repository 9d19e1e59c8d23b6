"""Abstract base class for dashboard data sources."""

from abc import ABC, abstractmethod

from sales_pulse.models.raw import ParsedTable


class BaseConnector(ABC):
    """
    Standard interface for remote table sources.
    A connector fetches raw text and knows how to parse its own wire format.
    """

    source_id: str = ""

    @abstractmethod
    async def fetch(self) -> str:
        """
        Retrieve the raw response body. Raises TransportError on failure.
        """
        pass

    @abstractmethod
    def parse(self, raw_text: str) -> ParsedTable:
        """
        Turn a raw response body into a ParsedTable. Raises FormatError on failure.
        """
        pass

    async def fetch_table(self) -> ParsedTable:
        """
        Fetch and parse in one step.
        Override for sources that can return structured data directly.
        """
        raw_text = await self.fetch()
        return self.parse(raw_text)

    async def aclose(self) -> None:
        """Release network resources. Default: nothing to release."""
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
