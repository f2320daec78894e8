from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

import requests

from market_status.core.clock import Clock, SystemClock
from market_status.models.schedule import TradingPeriod, TradingSchedule


@dataclass
class HttpScheduleProvider:
    """Fetches the day's trading schedule from the backend as JSON."""

    url: str
    timeout_seconds: float = 15.0

    _session: requests.Session = field(default_factory=requests.Session, init=False, repr=False)

    async def get_trading_schedule(self) -> Optional[TradingSchedule]:
        payload = await asyncio.to_thread(self._get_json)
        if payload is None:
            return None
        return TradingSchedule.from_dict(payload)

    def _get_json(self) -> Any:
        resp = self._session.get(self.url, timeout=self.timeout_seconds)
        resp.raise_for_status()
        return resp.json()

    def close(self) -> None:
        self._session.close()


MOCK_PERIODS: Tuple[TradingPeriod, ...] = (
    TradingPeriod(status="pre_market", text="Call Auction", start_time="09:15", end_time="09:30"),
    TradingPeriod(status="trading", text="Trading", start_time="09:30", end_time="11:30"),
    TradingPeriod(status="lunch_break", text="Lunch Break", start_time="11:30", end_time="13:00"),
    TradingPeriod(status="trading", text="Trading", start_time="13:00", end_time="15:00"),
)


@dataclass
class MockScheduleProvider:
    """Offline schedule: weekdays trade with a lunch break, weekends are closed."""

    clock: Clock = field(default_factory=SystemClock)
    periods: Tuple[TradingPeriod, ...] = MOCK_PERIODS

    async def get_trading_schedule(self) -> Optional[TradingSchedule]:
        today = self.clock.now()
        if today.weekday() >= 5:
            # Weekend schedules still carry the periods, otherwise the fetcher rejects them.
            return TradingSchedule(is_trade_day=False, holiday_name="Weekend", periods=self.periods)
        return TradingSchedule(is_trade_day=True, holiday_name="", periods=self.periods)
