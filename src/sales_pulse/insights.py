"""Derived figures the dashboard shows next to the raw series."""

from typing import Optional, Sequence

from sales_pulse.models.dashboard import ActivityPoint, RevenuePoint, SourceBreakdown, SummaryMetrics

# Growth factor for the one-period revenue projection
PROJECTION_GROWTH = 1.35


def top_source(breakdown: Sequence[SourceBreakdown]) -> Optional[SourceBreakdown]:
    """Source with the highest win rate; the earliest row wins ties."""
    best: Optional[SourceBreakdown] = None
    for entry in breakdown:
        if best is None or entry.win_rate > best.win_rate:
            best = entry
    return best


def average_deal_size(summary: SummaryMetrics) -> float:
    if not summary.converted_clients:
        return 0.0
    return summary.total_revenue / summary.converted_clients


def revenue_per_active_client(summary: SummaryMetrics) -> float:
    # active_client_load is floored at 1 during normalization
    return summary.total_revenue / summary.active_client_load


def revenue_attribution(
    summary: Optional[SummaryMetrics],
    breakdown: Sequence[SourceBreakdown],
) -> list[tuple[str, float]]:
    """
    Revenue slice per source, for sources that converted or carry revenue.
    Uses attributed revenue when the sheet provides any; otherwise estimates
    converted_count * average deal size.
    """
    if not breakdown:
        return []
    has_real_revenue = any(s.attributed_revenue > 0 for s in breakdown)
    avg_deal = average_deal_size(summary) if summary is not None else 0.0
    return [
        (s.source_name, s.attributed_revenue if has_real_revenue else s.converted_count * avg_deal)
        for s in breakdown
        if s.converted_count > 0 or s.attributed_revenue > 0
    ]


def total_activity(points: Sequence[ActivityPoint]) -> float:
    return sum(p.count for p in points)


def projected_revenue(points: Sequence[RevenuePoint], growth: float = PROJECTION_GROWTH) -> float:
    """Naive next-period projection: last period's amount times growth."""
    if not points:
        return 0.0
    return points[-1].amount * growth
