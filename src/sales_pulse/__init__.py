"""Live sales-pipeline dashboard feed from a Google Sheets tab."""

from sales_pulse.config import DashboardSettings, build_scheduler
from sales_pulse.errors import DashboardSyncError, EmptyDatasetError, FormatError, TransportError
from sales_pulse.normalizer import RatePolicy, normalize
from sales_pulse.pipeline import run_pipeline
from sales_pulse.scheduler import RefreshScheduler, SchedulerState

__all__ = [
    "DashboardSettings",
    "DashboardSyncError",
    "EmptyDatasetError",
    "FormatError",
    "RatePolicy",
    "RefreshScheduler",
    "SchedulerState",
    "TransportError",
    "build_scheduler",
    "normalize",
    "run_pipeline",
]
