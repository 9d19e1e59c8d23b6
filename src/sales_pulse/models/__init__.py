"""Data models for cells, layouts, and normalized dashboard records."""

from sales_pulse.models.cells import Cell, CellKind
from sales_pulse.models.dashboard import (
    ActivityPoint,
    DashboardSnapshot,
    NormalizedDashboard,
    RevenuePoint,
    SourceBreakdown,
    SummaryMetrics,
)
from sales_pulse.models.layout import ColumnLayout
from sales_pulse.models.raw import ParsedTable

__all__ = [
    "ActivityPoint",
    "Cell",
    "CellKind",
    "ColumnLayout",
    "DashboardSnapshot",
    "NormalizedDashboard",
    "ParsedTable",
    "RevenuePoint",
    "SourceBreakdown",
    "SummaryMetrics",
]
