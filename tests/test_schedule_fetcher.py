import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Union

from market_status.core.schedule_fetcher import ScheduleCell, ScheduleFetcher
from market_status.models.schedule import TradingSchedule


@dataclass
class StubLogger:
    infos: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def log_info(self, message: str) -> None:
        self.infos.append(message)

    def log_error(self, message: str) -> None:
        self.errors.append(message)


Response = Union[Exception, Optional[TradingSchedule]]


class ScriptedProvider:
    """Replays responses in order; the last one repeats forever."""

    def __init__(self, responses: Sequence[Response]):
        self._responses = list(responses)
        self.calls = 0

    async def get_trading_schedule(self) -> Optional[TradingSchedule]:
        idx = min(self.calls, len(self._responses) - 1)
        self.calls += 1
        response = self._responses[idx]
        if isinstance(response, Exception):
            raise response
        return response


START = datetime(2024, 1, 8, 8, 0)


def test_returns_first_valid_schedule_without_waiting(fake_clock, sample_schedule) -> None:
    clock = fake_clock(START)
    provider = ScriptedProvider([sample_schedule])
    fetcher = ScheduleFetcher(provider, StubLogger(), clock=clock)

    result = asyncio.run(fetcher.fetch_with_retry())

    assert result == sample_schedule
    assert fetcher.schedule == sample_schedule
    assert fetcher.attempts == 1
    assert clock.sleeps == []


def test_retries_until_success(fake_clock, sample_schedule) -> None:
    failures = [
        ConnectionError("backend down"),
        None,
        TradingSchedule(is_trade_day=True, periods=()),
        ValueError("bad payload"),
    ]

    async def scenario():
        clock = fake_clock(START)
        provider = ScriptedProvider(failures + [sample_schedule])
        logger = StubLogger()
        fetcher = ScheduleFetcher(provider, logger, clock=clock)

        task = asyncio.create_task(fetcher.fetch_with_retry())
        for _ in range(len(failures)):
            await clock.advance(0)
            assert fetcher.schedule is None
            await clock.advance(0.5)

        result = await task
        return clock, provider, logger, fetcher, result

    clock, provider, logger, fetcher, result = asyncio.run(scenario())

    assert result == sample_schedule
    assert fetcher.schedule == sample_schedule
    assert provider.calls == len(failures) + 1
    assert fetcher.attempts == len(failures) + 1
    assert clock.sleeps == [0.5] * len(failures)
    assert len(logger.errors) == len(failures)
    assert "backend down" in logger.errors[0]


def test_does_not_retry_before_backoff_elapses(fake_clock, sample_schedule) -> None:
    async def scenario():
        clock = fake_clock(START)
        provider = ScriptedProvider([RuntimeError("boom"), sample_schedule])
        fetcher = ScheduleFetcher(provider, StubLogger(), clock=clock)

        task = asyncio.create_task(fetcher.fetch_with_retry())
        await clock.advance(0.499)
        calls_before = provider.calls
        await clock.advance(0.001)
        await task
        return calls_before, provider.calls

    calls_before, calls_after = asyncio.run(scenario())
    assert calls_before == 1
    assert calls_after == 2


def test_empty_holiday_schedule_is_rejected_by_default(fake_clock) -> None:
    holiday = TradingSchedule(is_trade_day=False, holiday_name="New Year", periods=())

    async def scenario():
        clock = fake_clock(START)
        provider = ScriptedProvider([holiday])
        fetcher = ScheduleFetcher(provider, StubLogger(), clock=clock)

        task = asyncio.create_task(fetcher.fetch_with_retry())
        await clock.advance(5)
        still_running = not task.done()
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        return still_running, provider.calls, fetcher.schedule

    still_running, calls, schedule = asyncio.run(scenario())
    assert still_running
    assert calls == 11
    assert schedule is None


def test_empty_holiday_schedule_accepted_when_enabled(fake_clock) -> None:
    holiday = TradingSchedule(is_trade_day=False, holiday_name="New Year", periods=())
    fetcher = ScheduleFetcher(
        ScriptedProvider([holiday]),
        StubLogger(),
        clock=fake_clock(START),
        accept_empty_holiday=True,
    )

    assert asyncio.run(fetcher.fetch_with_retry()) == holiday


def test_empty_trade_day_schedule_rejected_even_when_holiday_flag_enabled() -> None:
    fetcher = ScheduleFetcher(ScriptedProvider([None]), StubLogger(), accept_empty_holiday=True)
    assert not fetcher.is_acceptable(TradingSchedule(is_trade_day=True, periods=()))
    assert not fetcher.is_acceptable(None)


def test_cell_notifies_listeners_on_publish(sample_schedule) -> None:
    cell = ScheduleCell()
    seen: List[TradingSchedule] = []
    cell.on_publish(seen.append)

    cell.publish(sample_schedule)

    assert cell.value == sample_schedule
    assert seen == [sample_schedule]


def test_custom_retry_delay(fake_clock, sample_schedule) -> None:
    async def scenario():
        clock = fake_clock(START)
        fetcher = ScheduleFetcher(
            ScriptedProvider([None, sample_schedule]), StubLogger(), clock=clock, retry_delay_ms=250
        )
        task = asyncio.create_task(fetcher.fetch_with_retry())
        await clock.advance(0.25)
        await task
        return clock.sleeps

    assert asyncio.run(scenario()) == [0.25]
