"""Column layout: which spreadsheet column feeds which metric."""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field


class ColumnLayout(BaseModel):
    """
    Zero-based column offsets into each gviz row.
    Offsets are a versioned contract with one spreadsheet layout, not header names.
    """

    model_config = ConfigDict(frozen=True)

    name: str = "custom"

    # Summary metrics, read from row 0 only
    total_opportunities: int = Field(0, ge=0)
    qualified_conversations: int = Field(1, ge=0)
    converted_clients: int = Field(2, ge=0)
    conversion_rate: int = Field(3, ge=0)
    total_revenue: int = Field(4, ge=0)
    active_client_load: int = Field(14, ge=0)

    # Revenue trend series
    revenue_period: int = Field(5, ge=0)
    revenue_amount: int = Field(6, ge=0)

    # Activity series
    activity_period: int = Field(7, ge=0)
    activity_count: int = Field(8, ge=0)

    # Per-source breakdown
    source_name: int = Field(9, ge=0)
    source_qualified: int = Field(10, ge=0)
    source_converted: int = Field(11, ge=0)
    source_rate: int = Field(12, ge=0)
    source_revenue: Optional[int] = Field(13, ge=0, description="None when the sheet has no attribution column")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ColumnLayout":
        """Load layout from YAML. Supports offsets nested under `columns:` or at top level."""
        data = yaml.safe_load(Path(path).read_text()) or {}
        columns = data.get("columns", {})
        flat = {**{k: v for k, v in data.items() if k != "columns"}, **columns}
        return cls.model_validate(flat)
