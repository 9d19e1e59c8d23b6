"""Pipeline orchestration: fetch → parse → normalize."""

import logging

from sales_pulse.connectors.base import BaseConnector
from sales_pulse.connectors.gviz.constants import DEFAULT_LAYOUT
from sales_pulse.models.dashboard import NormalizedDashboard
from sales_pulse.models.layout import ColumnLayout
from sales_pulse.normalizer import RatePolicy, normalize

logger = logging.getLogger(__name__)


async def run_pipeline(
    connector: BaseConnector,
    *,
    layout: ColumnLayout = DEFAULT_LAYOUT,
    rate_policy: RatePolicy = RatePolicy.PASS_THROUGH,
) -> NormalizedDashboard:
    """
    Run one full pass against a connector.
    The network read is the only await; parsing and normalization are synchronous,
    so the result always reflects exactly one response.
    Raises TransportError, FormatError, or EmptyDatasetError.
    """
    table = await connector.fetch_table()
    logger.debug("Fetched %d rows from %s", len(table.rows), connector.source_id)
    return normalize(table, layout=layout, rate_policy=rate_policy)
