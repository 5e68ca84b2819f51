#!/usr/bin/env python3
"""
Portfolio Watch: VC portfolio pages → new deal alerts on Telegram.
Runs 24/7: a Telegram command bot for on-demand scans plus a periodic scan.
"""

import logging
import signal
import sys
import threading
import time

import schedule

from portfoliowatch.config import Config, configure_logging
from portfoliowatch.notify.commands import CommandBot
from portfoliowatch.run.bootstrap import build_coordinator, build_notifier
from portfoliowatch.run.coordinator import RunAlreadyInProgress, RunCoordinator

logger = logging.getLogger(__name__)


def scheduled_scan(coordinator: RunCoordinator) -> None:
    try:
        coordinator.run()
        logger.info("Auto-scraping completed successfully")
    except RunAlreadyInProgress:
        logger.warning("Auto-scraping skipped: a scan is already running")
    except Exception as e:
        logger.error(f"Auto-scraping failed: {e}", exc_info=True)


def run_scheduler(coordinator: RunCoordinator, config: Config, stop: threading.Event) -> None:
    if stop.wait(config.initial_delay_seconds):
        return
    logger.info("Starting initial auto-scraping...")
    scheduled_scan(coordinator)

    schedule.every(config.scan_interval_hours).hours.do(scheduled_scan, coordinator)
    logger.info(f"Next auto-scraping at {schedule.next_run()}")
    while not stop.is_set():
        schedule.run_pending()
        stop.wait(30)


def main():
    try:
        config = Config.from_env()
    except ValueError as e:
        configure_logging()
        logger.error(f"Configuration error:\n{e}")
        sys.exit(1)
    configure_logging(config.log_file, config.log_level)
    logger.info("🚀 Portfolio Watch service starting...")
    logger.info(f"Telegram bot token: {config.masked_token()}")

    notifier = build_notifier(config)
    coordinator = build_coordinator(config, notifier)
    bot = CommandBot(notifier, coordinator, interval_hours=config.scan_interval_hours)
    stop = threading.Event()

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        stop.set()
        bot.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    scheduler = threading.Thread(
        target=run_scheduler, args=(coordinator, config, stop), name="scheduler", daemon=True
    )
    scheduler.start()
    logger.info(f"⏰ Auto scan every {config.scan_interval_hours:g} hours, first in {config.initial_delay_seconds}s")

    notifier.send("🤖 VC Portfolio Bot is now online!")
    try:
        bot.run_forever()
    finally:
        stop.set()
        notifier.send("⚠️ VC Portfolio Bot is shutting down...")
        # give an in-flight scan a moment to flush its snapshot
        deadline = time.monotonic() + 60
        while coordinator.is_running and time.monotonic() < deadline:
            time.sleep(1)
        logger.info("👋 Graceful shutdown completed")


if __name__ == "__main__":
    main()
