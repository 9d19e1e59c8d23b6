"""Unit tests for RefreshScheduler."""

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from sales_pulse.connectors.gviz import GvizConnector
from sales_pulse.errors import FormatError
from sales_pulse.models.dashboard import (
    DashboardSnapshot,
    NormalizedDashboard,
    RevenuePoint,
    SummaryMetrics,
)
from sales_pulse.pipeline import run_pipeline
from sales_pulse.scheduler import RefreshScheduler, SchedulerState

FIXED_NOW = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)


def _dashboard(total: int = 10) -> NormalizedDashboard:
    return NormalizedDashboard(
        summary=SummaryMetrics(total_opportunities=total),
        revenue_trend=(RevenuePoint(period_label="Jan", amount=total * 100),),
    )


class FakePipeline:
    """Pipeline stub: returns or raises queued outcomes, optionally waiting on a gate."""

    def __init__(self, *outcomes, gated: bool = False):
        self.outcomes = list(outcomes)
        self.calls = 0
        self.gate = asyncio.Event()
        if not gated:
            self.gate.set()

    async def __call__(self) -> NormalizedDashboard:
        self.calls += 1
        await self.gate.wait()
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class TestRefreshNow:
    """Tests for manual refresh."""

    @pytest.mark.asyncio
    async def test_success_publishes_data(self) -> None:
        """A successful pass replaces the snapshot with fresh data."""
        scheduler = RefreshScheduler(FakePipeline(_dashboard()), clock=lambda: FIXED_NOW)
        assert scheduler.state is SchedulerState.IDLE
        assert await scheduler.refresh_now() is True
        snap = scheduler.snapshot
        assert snap.summary.total_opportunities == 10
        assert snap.revenue_trend[0].amount == 1000
        assert snap.last_updated == FIXED_NOW
        assert snap.loading is False
        assert snap.error is None
        assert scheduler.state is SchedulerState.SUCCESS
        assert scheduler.last_success_at == FIXED_NOW

    @pytest.mark.asyncio
    async def test_overlapping_trigger_is_noop(self) -> None:
        """A trigger during an in-flight pass does nothing and is not queued."""
        pipeline = FakePipeline(_dashboard(), gated=True)
        scheduler = RefreshScheduler(pipeline)
        first = asyncio.create_task(scheduler.refresh_now())
        await asyncio.sleep(0)
        assert scheduler.in_flight
        assert scheduler.state is SchedulerState.FETCHING
        assert await scheduler.refresh_now() is False
        pipeline.gate.set()
        assert await first is True
        await asyncio.sleep(0)
        assert pipeline.calls == 1
        assert not scheduler.in_flight

    @pytest.mark.asyncio
    async def test_loading_published_during_pass(self) -> None:
        """Subscribers see loading=True, then the finished snapshot."""
        scheduler = RefreshScheduler(FakePipeline(_dashboard()))
        seen: list[DashboardSnapshot] = []
        scheduler.subscribe(seen.append)
        await scheduler.refresh_now()
        assert [s.loading for s in seen] == [True, False]
        assert seen[0].summary is None
        assert seen[1].summary is not None

    @pytest.mark.asyncio
    async def test_failure_preserves_previous_data(self) -> None:
        """A failing pass sets the error but keeps the last good data."""
        pipeline = FakePipeline(_dashboard(10), FormatError("Invalid data format from data source"))
        scheduler = RefreshScheduler(pipeline, clock=lambda: FIXED_NOW)
        await scheduler.refresh_now()
        good = scheduler.snapshot
        await scheduler.refresh_now()
        snap = scheduler.snapshot
        assert snap.error == "Invalid data format from data source"
        assert snap.loading is False
        assert snap.summary == good.summary
        assert snap.revenue_trend == good.revenue_trend
        assert snap.last_updated == good.last_updated
        assert scheduler.state is SchedulerState.FAILED
        assert scheduler.last_error_kind == "FORMAT_ERROR"
        assert scheduler.last_failure_at == FIXED_NOW

    @pytest.mark.asyncio
    async def test_recovers_after_failure(self) -> None:
        """The next successful pass clears the error."""
        pipeline = FakePipeline(FormatError("bad"), _dashboard(7))
        scheduler = RefreshScheduler(pipeline)
        await scheduler.refresh_now()
        assert scheduler.snapshot.error == "bad"
        assert scheduler.snapshot.summary is None
        await scheduler.refresh_now()
        assert scheduler.snapshot.error is None
        assert scheduler.snapshot.summary.total_opportunities == 7

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_error(self) -> None:
        """Non-sync exceptions are reported, not raised."""
        scheduler = RefreshScheduler(FakePipeline(KeyError("table")))
        assert await scheduler.refresh_now() is True
        assert scheduler.snapshot.error
        assert scheduler.state is SchedulerState.FAILED
        assert scheduler.last_error_kind == "KeyError"

    @pytest.mark.asyncio
    async def test_transport_failure_from_connector(self, mock_client_factory, sample_payload: str) -> None:
        """A non-OK HTTP status leaves data untouched and loading cleared."""
        responses = [(200, sample_payload), (502, "bad gateway")]

        def handler(request: httpx.Request) -> httpx.Response:
            status, body = responses.pop(0)
            return httpx.Response(status, text=body)

        client = mock_client_factory(handler=handler)
        connector = GvizConnector(url="https://sheet.test/q", client=client)
        scheduler = RefreshScheduler(lambda: run_pipeline(connector))
        await scheduler.refresh_now()
        good = scheduler.snapshot
        await scheduler.refresh_now()
        snap = scheduler.snapshot
        assert snap.loading is False
        assert "502" in snap.error
        assert snap.summary == good.summary
        assert snap.revenue_trend == good.revenue_trend
        assert snap.activity == good.activity
        assert snap.source_breakdown == good.source_breakdown
        assert scheduler.last_error_kind == "TRANSPORT_ERROR"
        await client.aclose()


class TestStartStop:
    """Tests for the periodic lifecycle."""

    def test_interval_must_be_positive(self) -> None:
        """Zero or negative intervals are rejected."""
        with pytest.raises(ValueError):
            RefreshScheduler(FakePipeline(_dashboard()), interval_seconds=0)

    @pytest.mark.asyncio
    async def test_start_runs_immediately(self) -> None:
        """start() enters FETCHING at once and completes a pass."""
        pipeline = FakePipeline(_dashboard())
        scheduler = RefreshScheduler(pipeline, interval_seconds=60)
        scheduler.start()
        assert scheduler.state is SchedulerState.FETCHING
        assert scheduler.snapshot.loading is True
        await asyncio.sleep(0.01)
        assert pipeline.calls == 1
        assert scheduler.state is SchedulerState.SUCCESS
        await scheduler.aclose()

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self) -> None:
        """A second start() does not launch another pass or timer."""
        pipeline = FakePipeline(_dashboard())
        scheduler = RefreshScheduler(pipeline, interval_seconds=60)
        scheduler.start()
        scheduler.start()
        await asyncio.sleep(0.01)
        assert pipeline.calls == 1
        await scheduler.aclose()

    @pytest.mark.asyncio
    async def test_timer_repeats(self) -> None:
        """The timer re-runs the pipeline every interval."""
        pipeline = FakePipeline(_dashboard())
        scheduler = RefreshScheduler(pipeline, interval_seconds=0.01)
        scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.aclose()
        assert pipeline.calls >= 3

    @pytest.mark.asyncio
    async def test_timer_skips_while_in_flight(self) -> None:
        """Ticks during a slow pass do not start another one."""
        pipeline = FakePipeline(_dashboard(), gated=True)
        scheduler = RefreshScheduler(pipeline, interval_seconds=0.01)
        scheduler.start()
        await asyncio.sleep(0.05)
        assert pipeline.calls == 1
        scheduler.stop()
        pipeline.gate.set()
        await scheduler.aclose()

    @pytest.mark.asyncio
    async def test_stop_discards_in_flight_result(self) -> None:
        """A pass that finishes after stop() does not publish."""
        pipeline = FakePipeline(_dashboard(), gated=True)
        scheduler = RefreshScheduler(pipeline, interval_seconds=60)
        published: list[DashboardSnapshot] = []
        scheduler.start()
        scheduler.subscribe(published.append)
        await asyncio.sleep(0)
        scheduler.stop()
        assert not scheduler.running
        pipeline.gate.set()
        await scheduler.aclose()
        assert published == []
        assert scheduler.snapshot.summary is None
        assert not scheduler.in_flight

    @pytest.mark.asyncio
    async def test_restart_while_stale_pass_in_flight(self) -> None:
        """start() right after stop() runs a fresh pass once the stale one settles."""
        pipeline = FakePipeline(_dashboard(), gated=True)
        scheduler = RefreshScheduler(pipeline, interval_seconds=60)
        scheduler.start()
        await asyncio.sleep(0)
        scheduler.stop()
        scheduler.start()
        assert pipeline.calls == 1
        pipeline.gate.set()
        await asyncio.sleep(0.05)
        assert pipeline.calls == 2
        assert scheduler.state is SchedulerState.SUCCESS
        assert scheduler.snapshot.loading is False
        assert scheduler.snapshot.summary is not None
        await scheduler.aclose()

    @pytest.mark.asyncio
    async def test_refresh_after_stop_is_noop(self) -> None:
        """refresh_now does nothing once the scheduler is torn down."""
        pipeline = FakePipeline(_dashboard())
        scheduler = RefreshScheduler(pipeline)
        scheduler.stop()
        assert await scheduler.refresh_now() is False
        assert pipeline.calls == 0

    @pytest.mark.asyncio
    async def test_aclose_runs_on_close(self) -> None:
        """aclose awaits the release hook."""
        closed: list[bool] = []

        async def on_close() -> None:
            closed.append(True)

        scheduler = RefreshScheduler(FakePipeline(_dashboard()), on_close=on_close)
        await scheduler.aclose()
        assert closed == [True]

    @pytest.mark.asyncio
    async def test_independent_instances(self) -> None:
        """Two schedulers keep separate snapshots."""
        a = RefreshScheduler(FakePipeline(_dashboard(1)))
        b = RefreshScheduler(FakePipeline(_dashboard(2)))
        await a.refresh_now()
        await b.refresh_now()
        assert a.snapshot.summary.total_opportunities == 1
        assert b.snapshot.summary.total_opportunities == 2


class TestSubscribers:
    """Tests for snapshot observers."""

    @pytest.mark.asyncio
    async def test_unsubscribe(self) -> None:
        """Unsubscribed callbacks stop receiving snapshots."""
        scheduler = RefreshScheduler(FakePipeline(_dashboard()))
        seen: list[DashboardSnapshot] = []
        unsubscribe = scheduler.subscribe(seen.append)
        unsubscribe()
        await scheduler.refresh_now()
        assert seen == []

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_block(self) -> None:
        """A raising subscriber is logged; others still get snapshots."""
        scheduler = RefreshScheduler(FakePipeline(_dashboard()))
        seen: list[DashboardSnapshot] = []

        def broken(snapshot: DashboardSnapshot) -> None:
            raise RuntimeError("render failed")

        scheduler.subscribe(broken)
        scheduler.subscribe(seen.append)
        await scheduler.refresh_now()
        assert len(seen) == 2
        assert scheduler.snapshot.summary is not None
