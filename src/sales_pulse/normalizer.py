"""Row normalization: ParsedTable -> NormalizedDashboard."""

import logging
from enum import Enum

from sales_pulse.connectors.gviz.constants import DEFAULT_LAYOUT
from sales_pulse.errors import EmptyDatasetError
from sales_pulse.models.dashboard import (
    ActivityPoint,
    NormalizedDashboard,
    RevenuePoint,
    SourceBreakdown,
    SummaryMetrics,
)
from sales_pulse.models.layout import ColumnLayout
from sales_pulse.models.raw import ParsedTable

logger = logging.getLogger(__name__)


class RatePolicy(str, Enum):
    """Sign handling for conversion and win rates."""

    PASS_THROUGH = "pass_through"
    # abs() of the source value, as the later sheet revision expects
    CLAMP_NON_NEGATIVE = "clamp_non_negative"


def _apply_rate_policy(value: float, policy: RatePolicy) -> float:
    if policy is RatePolicy.CLAMP_NON_NEGATIVE:
        return abs(value)
    return value


def extract_summary(
    table: ParsedTable,
    layout: ColumnLayout = DEFAULT_LAYOUT,
    rate_policy: RatePolicy = RatePolicy.PASS_THROUGH,
) -> SummaryMetrics:
    """Headline metrics from row 0. Non-numeric cells become 0; client load floors at 1."""

    def num(offset: int) -> float:
        return table.cell(0, offset).as_number()

    return SummaryMetrics(
        total_opportunities=int(num(layout.total_opportunities)),
        qualified_conversations=int(num(layout.qualified_conversations)),
        converted_clients=int(num(layout.converted_clients)),
        conversion_rate=_apply_rate_policy(num(layout.conversion_rate), rate_policy),
        total_revenue=num(layout.total_revenue),
        active_client_load=max(int(num(layout.active_client_load)), 1),
    )


def normalize(
    table: ParsedTable,
    layout: ColumnLayout = DEFAULT_LAYOUT,
    rate_policy: RatePolicy = RatePolicy.PASS_THROUGH,
) -> NormalizedDashboard:
    """
    Build the summary record and the three series from one parsed table.
    Each row contributes to each series independently; row order is kept.
    Raises EmptyDatasetError when the table has no rows.
    """
    if not table.rows:
        raise EmptyDatasetError()

    summary = extract_summary(table, layout, rate_policy)

    revenue_trend: list[RevenuePoint] = []
    activity: list[ActivityPoint] = []
    breakdown: list[SourceBreakdown] = []

    for i in range(len(table.rows)):
        period = table.cell(i, layout.revenue_period).as_text()
        amount = table.cell(i, layout.revenue_amount)
        if period and amount.is_number:
            revenue_trend.append(RevenuePoint(period_label=period, amount=amount.as_number()))

        week = table.cell(i, layout.activity_period).as_text()
        count = table.cell(i, layout.activity_count)
        if week and count.is_number:
            activity.append(ActivityPoint(period_label=week, count=count.as_number()))

        source = table.cell(i, layout.source_name).as_text()
        rate = table.cell(i, layout.source_rate)
        if source and rate.is_number:
            breakdown.append(
                SourceBreakdown(
                    source_name=source,
                    qualified_count=int(table.cell(i, layout.source_qualified).as_number()),
                    converted_count=int(table.cell(i, layout.source_converted).as_number()),
                    win_rate=_apply_rate_policy(rate.as_number(), rate_policy),
                    attributed_revenue=table.cell(i, layout.source_revenue).as_number(),
                )
            )

    total = len(table.rows)
    logger.debug(
        "Normalized %d rows (layout=%s): %d revenue, %d activity, %d source entries",
        total,
        layout.name,
        len(revenue_trend),
        len(activity),
        len(breakdown),
    )
    return NormalizedDashboard(
        summary=summary,
        revenue_trend=tuple(revenue_trend),
        activity=tuple(activity),
        source_breakdown=tuple(breakdown),
    )
