from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple, TypeVar

from dotenv import load_dotenv


TRUTHY = {"1", "true", "yes", "y", "on"}

N = TypeVar("N", int, float)


def _getenv_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in TRUTHY


def _getenv_number(name: str, default: N) -> N:
    """Read a numeric variable, converted to the type of its default."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return type(default)(raw.strip())


def _getenv_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class MonitorConfig:
    schedule_url: str
    request_timeout_seconds: float

    retry_delay_ms: int
    active_refresh_ms: int
    idle_refresh_ms: int
    active_statuses: Tuple[str, ...]
    accept_empty_holiday_schedule: bool

    mock_mode: bool
    log_level: str
    log_dir: str

    @classmethod
    def load(cls, dotenv_path: Optional[str] = None) -> "MonitorConfig":
        load_dotenv(dotenv_path=dotenv_path)

        return cls(
            schedule_url=os.getenv("SCHEDULE_URL", "http://127.0.0.1:8080/api/trading-schedule"),
            request_timeout_seconds=_getenv_number("REQUEST_TIMEOUT_SECONDS", 15.0),
            retry_delay_ms=_getenv_number("RETRY_DELAY_MS", 500),
            active_refresh_ms=_getenv_number("ACTIVE_REFRESH_MS", 1_000),
            idle_refresh_ms=_getenv_number("IDLE_REFRESH_MS", 60_000),
            active_statuses=_getenv_list("ACTIVE_STATUSES", ("trading", "pre_market")),
            accept_empty_holiday_schedule=_getenv_flag("ACCEPT_EMPTY_HOLIDAY_SCHEDULE", False),
            mock_mode=_getenv_flag("MOCK_MODE", True),
            log_level=os.getenv("LOG_LEVEL", "info"),
            log_dir=os.getenv("LOG_DIR", "logs"),
        )

    def validate(self) -> None:
        if not self.mock_mode and not self.schedule_url:
            raise ValueError("SCHEDULE_URL is required when MOCK_MODE is off")
        if self.request_timeout_seconds <= 0:
            raise ValueError("REQUEST_TIMEOUT_SECONDS must be > 0")
        if self.retry_delay_ms <= 0:
            raise ValueError("RETRY_DELAY_MS must be > 0")
        if self.active_refresh_ms <= 0:
            raise ValueError("ACTIVE_REFRESH_MS must be > 0")
        if self.idle_refresh_ms <= 0:
            raise ValueError("IDLE_REFRESH_MS must be > 0")
        if self.log_level.strip().upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("LOG_LEVEL must be one of debug, info, warning, error, critical")
