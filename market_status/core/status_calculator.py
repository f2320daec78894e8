from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from market_status.models.schedule import MarketStatus, TradingSchedule


CLOSED = "closed"


@dataclass(frozen=True)
class StatusLabels:
    """Display texts for the statuses the calculator produces itself."""

    closed: str = "Closed"
    holiday_closed: str = "{holiday} Closed"
    after_hours: str = "Market Closed"

    def for_holiday(self, holiday_name: str) -> str:
        if not holiday_name:
            return self.closed
        return self.holiday_closed.format(holiday=holiday_name)


DEFAULT_LABELS = StatusLabels()


def parse_time_to_minutes(value: str) -> Optional[int]:
    """Parse "HH:MM" (extra fields such as seconds are ignored) into minutes since midnight.

    Returns None when the value is unparsable.
    """
    parts = str(value).split(":")
    if len(parts) < 2:
        return None

    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None

    return hours * 60 + minutes


def calculate_status(
    schedule: TradingSchedule,
    now: datetime,
    labels: StatusLabels = DEFAULT_LABELS,
) -> MarketStatus:
    if not schedule.is_trade_day:
        return MarketStatus(
            status=CLOSED,
            status_text=labels.for_holiday(schedule.holiday_name),
            is_trade_day=False,
            holiday_name=schedule.holiday_name,
        )

    current = now.hour * 60 + now.minute

    for period in schedule.periods:
        start = parse_time_to_minutes(period.start_time)
        end = parse_time_to_minutes(period.end_time)
        # Unparsable bounds never match.
        if start is None or end is None:
            continue

        if start <= current < end:
            return MarketStatus(
                status=period.status,
                status_text=period.text,
                is_trade_day=True,
                holiday_name="",
            )

    return MarketStatus(
        status=CLOSED,
        status_text=labels.after_hours,
        is_trade_day=True,
        holiday_name="",
    )
