from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, List, Optional

from market_status.core.clock import Clock, SystemClock, seconds_until_next_midnight
from market_status.core.schedule_fetcher import Logger, ScheduleFetcher, ScheduleProvider
from market_status.core.status_calculator import DEFAULT_LABELS, StatusLabels, calculate_status
from market_status.core.task_slot import TaskSlot
from market_status.models.schedule import MarketStatus, TradingSchedule


StatusListener = Callable[[MarketStatus], None]

ACTIVE_STATUSES: FrozenSet[str] = frozenset({"trading", "pre_market"})


@dataclass(frozen=True)
class MonitorState:
    status: Optional[MarketStatus]
    schedule: Optional[TradingSchedule]


@dataclass
class StatusPublisher:
    """Publishes status snapshots, dropping ones whose key did not change."""

    logger: Logger

    _status: Optional[MarketStatus] = field(default=None, init=False)
    _last_key: str = field(default="", init=False)
    _listeners: List[StatusListener] = field(default_factory=list, init=False, repr=False)

    @property
    def status(self) -> Optional[MarketStatus]:
        return self._status

    @property
    def last_status_tag(self) -> str:
        return self._last_key.split(":", 1)[0]

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, status: MarketStatus) -> bool:
        key = status.key
        if key == self._last_key:
            return False

        self._last_key = key
        self._status = status
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception as e:
                self.logger.log_error(f"status listener error: {e}")
        return True


@dataclass
class MarketStatusMonitor:
    provider: ScheduleProvider
    logger: Logger
    clock: Clock = field(default_factory=SystemClock)
    labels: StatusLabels = DEFAULT_LABELS

    retry_delay_ms: int = 500
    active_refresh_ms: int = 1_000
    idle_refresh_ms: int = 60_000
    active_statuses: FrozenSet[str] = ACTIVE_STATUSES
    accept_empty_holiday: bool = False

    fetcher: ScheduleFetcher = field(init=False)
    publisher: StatusPublisher = field(init=False)

    _running: bool = field(default=False, init=False)
    _fetch_slot: TaskSlot = field(default_factory=lambda: TaskSlot("schedule-fetch"), init=False, repr=False)
    _recompute_slot: TaskSlot = field(default_factory=lambda: TaskSlot("status-recompute"), init=False, repr=False)
    _midnight_slot: TaskSlot = field(default_factory=lambda: TaskSlot("midnight-refresh"), init=False, repr=False)

    def __post_init__(self) -> None:
        self.active_statuses = frozenset(self.active_statuses)
        self.fetcher = ScheduleFetcher(
            self.provider,
            self.logger,
            clock=self.clock,
            retry_delay_ms=self.retry_delay_ms,
            accept_empty_holiday=self.accept_empty_holiday,
        )
        self.publisher = StatusPublisher(self.logger)
        self.fetcher.cell.on_publish(self._on_schedule_adopted)

    @property
    def status(self) -> Optional[MarketStatus]:
        return self.publisher.status

    @property
    def schedule(self) -> Optional[TradingSchedule]:
        return self.fetcher.schedule

    @property
    def running(self) -> bool:
        return self._running

    def snapshot(self) -> MonitorState:
        return MonitorState(status=self.status, schedule=self.schedule)

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        return self.publisher.subscribe(listener)

    def on_schedule(self, listener: Callable[[TradingSchedule], None]) -> None:
        self.fetcher.cell.on_publish(listener)

    async def start(self) -> None:
        if self._running:
            return

        self._running = True
        self.logger.log_info("Starting market status monitor")
        self._arm_midnight_refresh()
        self.refresh()

    async def stop(self) -> None:
        if not self._running:
            return

        self._running = False
        slots = (self._fetch_slot, self._recompute_slot, self._midnight_slot)
        for slot in slots:
            slot.cancel()
        for slot in slots:
            await slot.aclose()
        self.logger.log_info("Market status monitor stopped")

    def refresh(self) -> Optional[asyncio.Task]:
        """Run fetch-with-retry again; joins a fetch that is already in flight."""
        if not self._running:
            return None
        if self._fetch_slot.is_running():
            return self._fetch_slot.task
        return self._fetch_slot.replace(self.fetcher.fetch_with_retry())

    def refresh_interval(self) -> float:
        """Seconds until the next recompute, based on the last published status."""
        if self.publisher.last_status_tag in self.active_statuses:
            return self.active_refresh_ms / 1000.0
        return self.idle_refresh_ms / 1000.0

    def update(self) -> bool:
        schedule = self.schedule
        if not self._running or schedule is None:
            return False
        return self.publisher.publish(calculate_status(schedule, self.clock.now(), self.labels))

    def _on_schedule_adopted(self, schedule: TradingSchedule) -> None:
        if not self._running:
            return
        self._recompute_slot.replace(self._recompute_loop())
        self._arm_midnight_refresh()

    def _arm_midnight_refresh(self) -> None:
        self._midnight_slot.replace(self._midnight_refresh())

    async def _recompute_loop(self) -> None:
        self.update()
        while True:
            await self.clock.sleep(self.refresh_interval())
            self.update()

    async def _midnight_refresh(self) -> None:
        await self.clock.sleep(seconds_until_next_midnight(self.clock.now()))
        self.logger.log_info("Local midnight reached, refreshing trading schedule")
        self.refresh()
