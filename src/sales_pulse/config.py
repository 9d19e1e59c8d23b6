"""Runtime settings and wiring for the refresh scheduler."""

import functools
import os
from typing import Optional

import httpx
from pydantic import BaseModel, Field

from sales_pulse.connectors.gviz import GvizConnector, build_sheet_url
from sales_pulse.connectors.gviz.constants import DEFAULT_LAYOUT, LAYOUTS
from sales_pulse.connectors.gviz.parsers import EnvelopeStrategy
from sales_pulse.models.layout import ColumnLayout
from sales_pulse.normalizer import RatePolicy
from sales_pulse.pipeline import run_pipeline
from sales_pulse.scheduler import DEFAULT_REFRESH_INTERVAL, RefreshScheduler

ENV_SHEET_URL = "SALES_PULSE_SHEET_URL"
ENV_REFRESH_SECONDS = "SALES_PULSE_REFRESH_SECONDS"
ENV_RATE_POLICY = "SALES_PULSE_RATE_POLICY"
ENV_LAYOUT = "SALES_PULSE_LAYOUT"


def resolve_layout(name: str) -> ColumnLayout:
    """Named layout ('v1', 'v2') or a path to a layout YAML file."""
    layout = LAYOUTS.get(name.lower())
    if layout is not None:
        return layout
    if name.endswith((".yaml", ".yml")):
        return ColumnLayout.from_yaml(name)
    raise ValueError(f"Unknown layout: {name}. Available: {list(LAYOUTS.keys())} or a .yaml path")


class DashboardSettings(BaseModel):
    """Settings for one dashboard feed."""

    sheet_url: str = Field(default_factory=build_sheet_url)
    refresh_interval_seconds: float = Field(DEFAULT_REFRESH_INTERVAL, gt=0)
    request_timeout_seconds: float = Field(30.0, gt=0)
    rate_policy: RatePolicy = RatePolicy.PASS_THROUGH
    envelope_strategy: EnvelopeStrategy = EnvelopeStrategy.FIRST_LAST
    layout: ColumnLayout = DEFAULT_LAYOUT

    @classmethod
    def from_env(cls) -> "DashboardSettings":
        """Defaults overridden by SALES_PULSE_* environment variables when set."""
        overrides: dict = {}
        sheet_url = os.environ.get(ENV_SHEET_URL)
        if sheet_url:
            overrides["sheet_url"] = sheet_url
        refresh = os.environ.get(ENV_REFRESH_SECONDS)
        if refresh:
            overrides["refresh_interval_seconds"] = refresh
        policy = os.environ.get(ENV_RATE_POLICY)
        if policy:
            overrides["rate_policy"] = policy.lower()
        layout = os.environ.get(ENV_LAYOUT)
        if layout:
            overrides["layout"] = resolve_layout(layout)
        return cls.model_validate(overrides)


def build_scheduler(
    settings: Optional[DashboardSettings] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> RefreshScheduler:
    """
    Wire connector, pipeline, and scheduler for the given settings.
    The scheduler closes the connector on aclose().
    """
    settings = settings or DashboardSettings.from_env()
    connector = GvizConnector(
        url=settings.sheet_url,
        client=client,
        timeout=settings.request_timeout_seconds,
        envelope_strategy=settings.envelope_strategy,
    )
    pipeline = functools.partial(
        run_pipeline,
        connector,
        layout=settings.layout,
        rate_policy=settings.rate_policy,
    )
    return RefreshScheduler(
        pipeline,
        settings.refresh_interval_seconds,
        on_close=connector.aclose,
    )
