"""Normalized dashboard records and the published snapshot."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SummaryMetrics(BaseModel):
    """Headline KPIs taken from the first data row."""

    model_config = ConfigDict(frozen=True)

    total_opportunities: int = 0
    qualified_conversations: int = 0
    converted_clients: int = 0
    conversion_rate: float = 0.0
    total_revenue: float = 0.0
    active_client_load: int = Field(1, ge=1)


class RevenuePoint(BaseModel):
    """One period of the revenue trend."""

    model_config = ConfigDict(frozen=True)

    period_label: str = Field(..., min_length=1)
    amount: float


class ActivityPoint(BaseModel):
    """One period of the qualified-conversation activity series."""

    model_config = ConfigDict(frozen=True)

    period_label: str = Field(..., min_length=1)
    count: float


class SourceBreakdown(BaseModel):
    """Conversion figures for one lead source row."""

    model_config = ConfigDict(frozen=True)

    source_name: str = Field(..., min_length=1)
    qualified_count: int = 0
    converted_count: int = 0
    win_rate: float = 0.0
    attributed_revenue: float = 0.0


class NormalizedDashboard(BaseModel):
    """Everything one normalization pass produces from a single fetch."""

    model_config = ConfigDict(frozen=True)

    summary: SummaryMetrics
    revenue_trend: tuple[RevenuePoint, ...] = ()
    activity: tuple[ActivityPoint, ...] = ()
    source_breakdown: tuple[SourceBreakdown, ...] = ()


class DashboardSnapshot(BaseModel):
    """
    State published to the presentation layer.
    Replaced wholesale on every transition; data fields only change together.
    """

    model_config = ConfigDict(frozen=True)

    summary: Optional[SummaryMetrics] = None
    revenue_trend: tuple[RevenuePoint, ...] = ()
    activity: tuple[ActivityPoint, ...] = ()
    source_breakdown: tuple[SourceBreakdown, ...] = ()
    last_updated: Optional[datetime] = None
    loading: bool = False
    error: Optional[str] = None

    @property
    def has_data(self) -> bool:
        return self.summary is not None

    def with_data(self, data: NormalizedDashboard, updated_at: datetime) -> "DashboardSnapshot":
        """New snapshot carrying a fresh pass's data; clears loading and error."""
        return DashboardSnapshot(
            summary=data.summary,
            revenue_trend=data.revenue_trend,
            activity=data.activity,
            source_breakdown=data.source_breakdown,
            last_updated=updated_at,
            loading=False,
            error=None,
        )

    def with_status(self, *, loading: bool, error: Optional[str]) -> "DashboardSnapshot":
        """Copy with only loading/error changed; data fields are kept as-is."""
        return self.model_copy(update={"loading": loading, "error": error})
