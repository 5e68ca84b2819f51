#!/usr/bin/env python3
"""Portfolio scan worker without the command bot.

Runs one scan cycle (default) or keeps scanning on a timer:

    RUN_MODE=once       single scan, exit status 0
    RUN_MODE=scheduled  scan now, then every SCAN_INTERVAL_HOURS
"""

from __future__ import annotations

import logging
import os
import sys
import time

import schedule

from portfoliowatch.config import Config, configure_logging
from portfoliowatch.run.bootstrap import build_coordinator
from portfoliowatch.run.coordinator import RunAlreadyInProgress, RunCoordinator

logger = logging.getLogger(__name__)


def run_once(coordinator: RunCoordinator) -> int:
    try:
        report = coordinator.run()
    except RunAlreadyInProgress:
        logger.warning("[scan] skipped, previous scan still running")
        return 0
    print(
        f"[scan] sources={report.total_sources} names={report.total_names} "
        f"new={report.total_new_deals} failed={len(report.failures)} degraded={report.degraded}"
    )
    return 0


def run_scheduled(coordinator: RunCoordinator, interval_hours: float) -> None:
    run_once(coordinator)
    schedule.every(interval_hours).hours.do(run_once, coordinator)
    while True:
        schedule.run_pending()
        time.sleep(5)


def main() -> int:
    try:
        config = Config.from_env()
    except ValueError as e:
        configure_logging()
        logger.error(f"Configuration error:\n{e}")
        return 1
    configure_logging(config.log_file, config.log_level)
    coordinator = build_coordinator(config)

    mode = (os.environ.get("RUN_MODE") or "once").lower().strip()
    if mode in ("scheduled", "daemon"):
        run_scheduled(coordinator, config.scan_interval_hours)
        return 0
    return run_once(coordinator)


if __name__ == "__main__":
    sys.exit(main())
