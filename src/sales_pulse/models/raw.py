"""Parsed gviz table before normalization."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from sales_pulse.models.cells import Cell


class ParsedTable(BaseModel):
    """
    Rows of typed cells extracted from a gviz query response.
    Column positions are preserved; a row shorter than the layout simply has
    missing cells at the tail.
    """

    rows: list[list[Cell]] = Field(default_factory=list)
    column_labels: list[str] = Field(default_factory=list)
    status: Optional[str] = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "ParsedTable":
        """Build from the decoded JSON document ({"table": {"cols": [...], "rows": [...]}})."""
        table = doc.get("table") or {}
        raw_rows = table.get("rows")
        if not isinstance(raw_rows, list):
            raw_rows = []
        rows: list[list[Cell]] = []
        for raw_row in raw_rows:
            cells = raw_row.get("c") if isinstance(raw_row, dict) else None
            rows.append([Cell.from_raw(c) for c in cells] if isinstance(cells, list) else [])

        cols = table.get("cols")
        if not isinstance(cols, list):
            cols = []
        labels = [
            (col.get("label") or "") if isinstance(col, dict) else ""
            for col in cols
        ]
        return cls(rows=rows, column_labels=labels, status=doc.get("status"))

    def cell(self, row_index: int, offset: Optional[int]) -> Cell:
        """Cell at (row, column); MISSING when the row is short or offset is None."""
        row = self.rows[row_index]
        if offset is None or offset >= len(row):
            return Cell.missing()
        return row[offset]
