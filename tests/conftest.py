"""Pytest fixtures for sales-pulse tests."""

import json
from typing import Any, Optional

import httpx
import pytest

from sales_pulse.connectors.gviz.constants import LAYOUT_V1
from sales_pulse.models.layout import ColumnLayout
from sales_pulse.models.raw import ParsedTable

GVIZ_PREFIX = "/*O_o*/\ngoogle.visualization.Query.setResponse("
GVIZ_SUFFIX = ");"


def _cells(values: list[Any]) -> list[Optional[dict]]:
    """gviz `c` array: None stays a null cell, anything else becomes {"v": value}."""
    return [None if v is None else {"v": v} for v in values]


def _build_document(rows: list[list[Any]], status: str = "ok") -> dict:
    """gviz document with one `c` array per row."""
    return {
        "version": "0.6",
        "reqId": "0",
        "status": status,
        "table": {
            "cols": [{"id": chr(ord("A") + i), "label": "", "type": "string"} for i in range(15)],
            "rows": [{"c": _cells(r)} for r in rows],
        },
    }


def _wrap_gviz(doc: dict) -> str:
    """JSONP body exactly as the gviz endpoint sends it."""
    return GVIZ_PREFIX + json.dumps(doc) + GVIZ_SUFFIX


def _table_from_rows(rows: list[list[Any]]) -> ParsedTable:
    return ParsedTable.from_document(_build_document(rows))


@pytest.fixture
def sample_rows() -> list[list[Any]]:
    """Three sheet rows in the v2 layout (attribution in N, client load in O)."""
    return [
        [120, 48, 12, 0.25, 54000, "Jan", 12000, "W1", 14, "LinkedIn", 20, 6, 0.3, 27000, 9],
        [None, None, None, None, None, "Feb", 18000, "W2", 11, "Instantly", 18, 4, -0.22, 18000, None],
        [None, None, None, None, None, "Mar", 24000, "W3", 23, "Organic", 10, 2, 0.2, 9000, None],
    ]


@pytest.fixture
def sample_table(sample_rows: list[list[Any]]) -> ParsedTable:
    return _table_from_rows(sample_rows)


@pytest.fixture
def sample_payload(sample_rows: list[list[Any]]) -> str:
    """Full gviz response body for the sample rows."""
    return _wrap_gviz(_build_document(sample_rows))


@pytest.fixture
def make_table():
    """Build a ParsedTable from rows of plain values (None = null cell)."""
    return _table_from_rows


@pytest.fixture
def make_document():
    """Build a gviz document dict from rows of plain values."""
    return _build_document


@pytest.fixture
def wrap_gviz():
    """Wrap a gviz document in the JSONP envelope."""
    return _wrap_gviz


@pytest.fixture
def shifted_layout() -> ColumnLayout:
    """Layout whose revenue series starts one column later than v1."""
    return LAYOUT_V1.model_copy(update={"name": "shifted", "revenue_period": 6, "revenue_amount": 7})


@pytest.fixture
def mock_client_factory():
    """Build an httpx.AsyncClient that answers every request with the given status and body."""

    def factory(status_code: int = 200, text: str = "", handler=None) -> httpx.AsyncClient:
        def default_handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, text=text)

        return httpx.AsyncClient(transport=httpx.MockTransport(handler or default_handler))

    return factory
