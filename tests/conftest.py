"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Callable, List, Tuple

import pytest

from market_status.models.schedule import TradingPeriod, TradingSchedule


async def settle(rounds: int = 20) -> None:
    """Let every ready callback on the loop run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeClock:
    """Virtual clock: sleeps only finish when the test advances time."""

    def __init__(self, now: datetime) -> None:
        self._now = now
        self._seq = 0
        self._waiters: List[Tuple[datetime, int, asyncio.Future]] = []
        self.sleeps: List[float] = []

    def now(self) -> datetime:
        return self._now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self._seq += 1
        fut = asyncio.get_running_loop().create_future()
        entry = (self._now + timedelta(seconds=seconds), self._seq, fut)
        self._waiters.append(entry)
        try:
            await fut
        finally:
            if entry in self._waiters:
                self._waiters.remove(entry)

    @property
    def pending(self) -> int:
        return sum(1 for _, _, fut in self._waiters if not fut.done())

    async def advance(self, seconds: float) -> None:
        target = self._now + timedelta(seconds=seconds)
        await settle()
        while True:
            due = [w for w in self._waiters if w[0] <= target and not w[2].done()]
            if not due:
                break
            deadline, _, fut = min(due, key=lambda w: (w[0], w[1]))
            if deadline > self._now:
                self._now = deadline
            fut.set_result(None)
            await settle()
        self._now = target
        await settle()


@pytest.fixture
def fake_clock() -> Callable[[datetime], FakeClock]:
    return FakeClock


@pytest.fixture
def sample_schedule() -> TradingSchedule:
    """Pre-market then one continuous trading session."""
    return TradingSchedule(
        is_trade_day=True,
        holiday_name="",
        periods=(
            TradingPeriod(status="pre_market", text="Pre-Market", start_time="09:00", end_time="09:30"),
            TradingPeriod(status="trading", text="Trading", start_time="09:30", end_time="15:00"),
        ),
    )
