from __future__ import annotations

import asyncio
import os
import signal
import sys


if __package__ is None or __package__ == "":
    # Allow running via: python market_status/main.py
    sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from market_status.connectors.schedule_provider import HttpScheduleProvider, MockScheduleProvider
from market_status.core.config import MonitorConfig
from market_status.logger.console_logger import ConsoleLogger
from market_status.services.market_status_monitor import MarketStatusMonitor


def build_monitor(cfg: MonitorConfig, logger: ConsoleLogger) -> MarketStatusMonitor:
    if cfg.mock_mode:
        provider = MockScheduleProvider()
    else:
        provider = HttpScheduleProvider(url=cfg.schedule_url, timeout_seconds=cfg.request_timeout_seconds)

    monitor = MarketStatusMonitor(
        provider,
        logger,
        retry_delay_ms=cfg.retry_delay_ms,
        active_refresh_ms=cfg.active_refresh_ms,
        idle_refresh_ms=cfg.idle_refresh_ms,
        active_statuses=frozenset(cfg.active_statuses),
        accept_empty_holiday=cfg.accept_empty_holiday_schedule,
    )
    monitor.on_schedule(logger.log_schedule_loaded)
    monitor.subscribe(logger.log_status_change)
    return monitor


async def run() -> None:
    cfg = MonitorConfig.load()
    cfg.validate()

    logger = ConsoleLogger(log_dir=cfg.log_dir, log_level=cfg.log_level)
    logger.log_info(
        f"Config | mock={cfg.mock_mode} url={cfg.schedule_url} "
        f"refresh={cfg.active_refresh_ms}ms/{cfg.idle_refresh_ms}ms retry={cfg.retry_delay_ms}ms"
    )

    monitor = build_monitor(cfg, logger)

    stop_event = asyncio.Event()

    def _request_stop() -> None:
        logger.log_warning("Shutdown requested")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_stop)
        except NotImplementedError:
            # add_signal_handler is not available on some platforms.
            pass

    await monitor.start()
    try:
        await stop_event.wait()
    finally:
        await monitor.stop()
        provider = monitor.provider
        if isinstance(provider, HttpScheduleProvider):
            provider.close()


def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
