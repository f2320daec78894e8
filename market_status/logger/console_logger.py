from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from market_status.models.schedule import MarketStatus, TradingSchedule


STATUS_STYLES = {
    "trading": "bold green",
    "pre_market": "bold yellow",
    "closed": "bold red",
}


def _ts() -> str:
    return datetime.now().strftime("%H:%M:%S")


@dataclass
class ConsoleLogger:
    log_dir: str = "logs"
    log_file: str = "market_status.log"
    log_level: str = "info"

    console: Console = field(default_factory=lambda: Console(encoding="utf-8"), init=False)
    file_logger: logging.Logger = field(default_factory=lambda: logging.getLogger("market_status"), init=False)

    def __post_init__(self) -> None:
        os.makedirs(self.log_dir, exist_ok=True)

        level = getattr(logging, self.log_level.strip().upper(), logging.INFO)
        self.file_logger.setLevel(level)
        self.file_logger.propagate = False
        self.file_logger.handlers.clear()

        fh = logging.FileHandler(
            os.path.join(self.log_dir, self.log_file),
            encoding="utf-8",
        )
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
        self.file_logger.addHandler(fh)

        self._print_header()

    def _print_header(self) -> None:
        title = Text("MARKET STATUS MONITOR", style="bold cyan")
        self.console.print(Panel(title, expand=False, border_style="cyan"))

    def _log(self, message: str, *, level: int = logging.INFO, style: Optional[str] = None) -> None:
        if not self.file_logger.isEnabledFor(level):
            return

        prefix = f"[{_ts()}] "
        if style:
            self.console.print(prefix + message, style=style)
        else:
            self.console.print(prefix + message)
        self.file_logger.log(level, message)

    def log_schedule_loaded(self, schedule: TradingSchedule) -> None:
        if not schedule.is_trade_day:
            label = schedule.holiday_name or "non-trading day"
            self._log(f"📅 Schedule loaded | {label}", style="cyan")
            return

        windows = ", ".join(f"{p.status} {p.start_time}-{p.end_time}" for p in schedule.periods)
        self._log(f"📅 Schedule loaded | trading day | {windows}", style="cyan")

    def log_status_change(self, status: MarketStatus) -> None:
        style = STATUS_STYLES.get(status.status, "bold")
        self._log(f"🔔 Market status: {status.status_text} ({status.status})", style=style)

    def log_info(self, message: str) -> None:
        self._log(message)

    def log_warning(self, message: str) -> None:
        self._log(f"⚠️ {message}", level=logging.WARNING, style="yellow")

    def log_error(self, message: str) -> None:
        self._log(f"❌ {message}", level=logging.ERROR, style="bold red")
