"""Periodic refresh of the dashboard snapshot.

One RefreshScheduler owns one DashboardSnapshot. It runs the pipeline once on
start, again every interval, and on demand via refresh_now(). At most one pass
is in flight; triggers that arrive meanwhile are dropped, not queued. Every
state change is published as a new snapshot object.
"""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Optional

from sales_pulse.errors import DashboardSyncError
from sales_pulse.models.dashboard import DashboardSnapshot, NormalizedDashboard

logger = logging.getLogger(__name__)

Pipeline = Callable[[], Awaitable[NormalizedDashboard]]
Subscriber = Callable[[DashboardSnapshot], None]

DEFAULT_REFRESH_INTERVAL = 5 * 60.0


class SchedulerState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    SUCCESS = "success"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RefreshScheduler:
    """
    Owner of the live dashboard snapshot.
    Must be started from inside a running event loop.
    """

    def __init__(
        self,
        pipeline: Pipeline,
        interval_seconds: float = DEFAULT_REFRESH_INTERVAL,
        *,
        clock: Callable[[], datetime] = _utcnow,
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._pipeline = pipeline
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._on_close = on_close

        self._snapshot = DashboardSnapshot()
        self._state = SchedulerState.IDLE
        self._subscribers: list[Subscriber] = []

        self._in_flight = False
        self._current_pass: Optional[asyncio.Task] = None
        self._timer_task: Optional[asyncio.Task] = None
        self._stopped = False
        # Bumped on stop(); a pass publishes only if its generation is still current
        self._generation = 0
        # start() arrived while a pass from before stop() was still running
        self._restart_pending = False

        self.last_success_at: Optional[datetime] = None
        self.last_failure_at: Optional[datetime] = None
        self.last_error_kind: Optional[str] = None

    @property
    def snapshot(self) -> DashboardSnapshot:
        return self._snapshot

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def running(self) -> bool:
        return self._timer_task is not None

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for every published snapshot. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def start(self) -> None:
        """Kick off an immediate pass and the recurring timer. No-op if already running."""
        if self._timer_task is not None:
            return
        self._stopped = False
        loop = asyncio.get_running_loop()
        if self._in_flight:
            self._restart_pending = True
        else:
            self._begin_pass()
        self._timer_task = loop.create_task(self._tick_forever())
        logger.info("Refresh scheduler started (interval=%ss)", self.interval_seconds)

    def stop(self) -> None:
        """
        Cancel the timer. An in-flight pass is left to finish, but its result
        is discarded instead of published.
        """
        self._stopped = True
        self._restart_pending = False
        self._generation += 1
        if self._timer_task is not None:
            self._timer_task.cancel()
            self._timer_task = None
            logger.info("Refresh scheduler stopped")

    async def aclose(self) -> None:
        """Stop, wait for any in-flight pass to settle, and release resources."""
        self.stop()
        if self._current_pass is not None:
            await asyncio.shield(self._current_pass)
        if self._on_close is not None:
            await self._on_close()

    async def refresh_now(self) -> bool:
        """
        Run a pass now and wait for it.
        Returns False without doing anything if a pass is already in flight
        or the scheduler has been stopped.
        """
        if self._stopped:
            logger.debug("Manual refresh ignored: scheduler stopped")
            return False
        if self._in_flight:
            logger.debug("Manual refresh ignored: a pass is already in flight")
            return False
        # shield: cancelling the caller must not cancel the pass itself
        await asyncio.shield(self._begin_pass())
        return True

    async def _tick_forever(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            if self._in_flight:
                logger.debug("Scheduled refresh skipped: a pass is already in flight")
                continue
            self._begin_pass()

    def _begin_pass(self) -> asyncio.Task:
        self._in_flight = True
        self._state = SchedulerState.FETCHING
        self._publish(self._snapshot.with_status(loading=True, error=None))
        task = asyncio.get_running_loop().create_task(self._run_pass(self._generation))
        self._current_pass = task
        return task

    async def _run_pass(self, generation: int) -> None:
        try:
            try:
                data = await self._pipeline()
            except DashboardSyncError as e:
                logger.warning("Dashboard refresh failed (%s): %s", e.code, e)
                self._finish_failed(generation, e, e.code)
            except Exception as e:
                logger.exception("Unexpected error during dashboard refresh")
                self._finish_failed(generation, e, type(e).__name__)
            else:
                self._finish_success(generation, data)
        finally:
            self._in_flight = False
            self._current_pass = None
            restart = self._restart_pending and generation != self._generation and not self._stopped
            self._restart_pending = False
            if restart:
                self._begin_pass()

    def _is_current(self, generation: int) -> bool:
        if generation != self._generation:
            logger.debug("Discarding result of a pass that outlived its scheduler run")
            return False
        return True

    def _finish_success(self, generation: int, data: NormalizedDashboard) -> None:
        if not self._is_current(generation):
            return
        now = self._clock()
        self.last_success_at = now
        self._state = SchedulerState.SUCCESS
        self._publish(self._snapshot.with_data(data, now))
        logger.info(
            "Dashboard refreshed: %d revenue points, %d activity points, %d sources",
            len(data.revenue_trend),
            len(data.activity),
            len(data.source_breakdown),
        )

    def _finish_failed(self, generation: int, error: Exception, kind: str) -> None:
        if not self._is_current(generation):
            return
        self.last_failure_at = self._clock()
        self.last_error_kind = kind
        self._state = SchedulerState.FAILED
        message = str(error) or "Unknown sync error"
        self._publish(self._snapshot.with_status(loading=False, error=message))

    def _publish(self, snapshot: DashboardSnapshot) -> None:
        self._snapshot = snapshot
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Snapshot subscriber raised")
