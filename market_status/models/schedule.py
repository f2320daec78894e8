from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True)
class TradingPeriod:
    """One time window of a trading day, e.g. 09:30-11:30 "trading"."""

    status: str
    text: str
    start_time: str
    end_time: str

    @classmethod
    def from_dict(cls, data: Any) -> "TradingPeriod":
        if not isinstance(data, Mapping):
            raise ValueError(f"trading period must be an object, got {type(data).__name__}")

        return cls(
            status=str(data.get("status") or ""),
            text=str(data.get("text") or ""),
            start_time=str(data.get("startTime") or data.get("start_time") or ""),
            end_time=str(data.get("endTime") or data.get("end_time") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "status": self.status,
            "text": self.text,
            "startTime": self.start_time,
            "endTime": self.end_time,
        }


@dataclass(frozen=True)
class TradingSchedule:
    is_trade_day: bool
    holiday_name: str = ""
    periods: Tuple[TradingPeriod, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Any) -> "TradingSchedule":
        if not isinstance(data, Mapping):
            raise ValueError(f"trading schedule must be an object, got {type(data).__name__}")

        raw_periods = data.get("periods")
        if raw_periods is None:
            raw_periods = []
        if not isinstance(raw_periods, list):
            raise ValueError("trading schedule periods must be a list")

        is_trade_day = data.get("isTradeDay", data.get("is_trade_day", False))
        if not isinstance(is_trade_day, bool):
            raise ValueError(f"isTradeDay must be a boolean, got {is_trade_day!r}")

        return cls(
            is_trade_day=is_trade_day,
            holiday_name=str(data.get("holidayName") or data.get("holiday_name") or ""),
            periods=tuple(TradingPeriod.from_dict(p) for p in raw_periods),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isTradeDay": self.is_trade_day,
            "holidayName": self.holiday_name,
            "periods": [p.to_dict() for p in self.periods],
        }


@dataclass(frozen=True)
class MarketStatus:
    status: str
    status_text: str
    is_trade_day: bool
    holiday_name: str = ""

    @property
    def key(self) -> str:
        return f"{self.status}:{self.status_text}"
