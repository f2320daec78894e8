from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

from market_status.core.clock import Clock, SystemClock
from market_status.models.schedule import TradingSchedule


ScheduleListener = Callable[[TradingSchedule], None]


class Logger(Protocol):
    def log_error(self, message: str) -> None: ...

    def log_info(self, message: str) -> None: ...


class ScheduleProvider(Protocol):
    async def get_trading_schedule(self) -> Optional[TradingSchedule]: ...


@dataclass
class ScheduleCell:
    """The current trading schedule plus the callbacks waiting on its changes.

    Only ScheduleFetcher publishes into the cell; everything else reads it.
    """

    _value: Optional[TradingSchedule] = field(default=None, init=False)
    _listeners: List[ScheduleListener] = field(default_factory=list, init=False, repr=False)

    @property
    def value(self) -> Optional[TradingSchedule]:
        return self._value

    def on_publish(self, listener: ScheduleListener) -> None:
        self._listeners.append(listener)

    def publish(self, schedule: TradingSchedule) -> None:
        self._value = schedule
        for listener in list(self._listeners):
            listener(schedule)


@dataclass
class ScheduleFetcher:
    provider: ScheduleProvider
    logger: Logger
    clock: Clock = field(default_factory=SystemClock)
    retry_delay_ms: int = 500
    accept_empty_holiday: bool = False

    cell: ScheduleCell = field(default_factory=ScheduleCell, init=False)
    attempts: int = field(default=0, init=False)

    @property
    def schedule(self) -> Optional[TradingSchedule]:
        return self.cell.value

    def is_acceptable(self, schedule: Optional[TradingSchedule]) -> bool:
        if schedule is None:
            return False
        if schedule.periods:
            return True
        # Holidays may legitimately come without periods; rejected unless opted in.
        return self.accept_empty_holiday and not schedule.is_trade_day

    async def fetch_with_retry(self) -> TradingSchedule:
        """Fetch until the provider returns an acceptable schedule.

        Never raises except for cancellation. Failures are logged and retried
        after a fixed delay, with no limit on the number of attempts.
        """
        self.attempts = 0

        while True:
            self.attempts += 1
            try:
                schedule = await self.provider.get_trading_schedule()
            except Exception as e:
                self.logger.log_error(
                    f"Trading schedule fetch failed (attempt {self.attempts}), "
                    f"retrying in {self.retry_delay_ms}ms: {e}"
                )
            else:
                if self.is_acceptable(schedule):
                    self.cell.publish(schedule)
                    return schedule

                self.logger.log_error(
                    f"Trading schedule empty or missing (attempt {self.attempts}), "
                    f"retrying in {self.retry_delay_ms}ms"
                )

            await self.clock.sleep(self.retry_delay_ms / 1000.0)
