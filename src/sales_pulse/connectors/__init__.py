"""Source connectors for dashboard ingestion."""

from sales_pulse.connectors.base import BaseConnector
from sales_pulse.connectors.gviz import GvizConnector

__all__ = ["BaseConnector", "GvizConnector"]
