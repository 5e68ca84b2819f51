"""Telegram command front end: lets a chat trigger and inspect scans.

Commands:
    /start, /help          usage
    /source, /start_scraping  start a scan now (rejected if one is running)
    /status                whether a scan is running, plus the last result
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

from portfoliowatch.notify.telegram import TelegramNotifier
from portfoliowatch.run.coordinator import RunAlreadyInProgress, RunCoordinator

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "🤖 VC Portfolio Scraper Bot\n\n"
    "Commands:\n"
    "/source - Start scraping VC portfolios\n"
    "/status - Check bot status\n"
    "/help - Show this help message"
)
ALREADY_RUNNING_TEXT = "⚠️ Scraping is already running! Please wait..."
UNKNOWN_COMMAND_TEXT = "❓ Unknown command. Use /help to see available commands."


class CommandBot:
    def __init__(
        self,
        notifier: TelegramNotifier,
        coordinator: RunCoordinator,
        *,
        interval_hours: float = 2.0,
        spawn: Optional[Callable[[Callable[[], None]], Any]] = None,
    ):
        self.notifier = notifier
        self.coordinator = coordinator
        self.interval_hours = interval_hours
        self.offset = 0
        self.running = False
        self._spawn = spawn or self._spawn_thread

    @staticmethod
    def _spawn_thread(target: Callable[[], None]) -> threading.Thread:
        t = threading.Thread(target=target, name="manual-scan", daemon=True)
        t.start()
        return t

    def status_text(self) -> str:
        if self.coordinator.is_running:
            return "🟢 Scraper is currently running..."
        text = f"🟢 Bot is online and ready!\n📊 Auto-scraping every {self.interval_hours:g} hours"
        last = self.coordinator.last_report
        if last is not None:
            text += (
                f"\n🕒 Last scan {last.started_at:%Y-%m-%d %H:%M} UTC: "
                f"{last.total_new_deals} new, {len(last.failures)} failed"
            )
            if last.degraded:
                text += "\n⚠️ Last scan could not reach the database"
        return text

    def _manual_scan(self, chat_id: str) -> None:
        try:
            report = self.coordinator.run(destination=chat_id)
        except RunAlreadyInProgress:
            self.notifier.send(ALREADY_RUNNING_TEXT, chat_id)
            return
        except Exception as e:
            logger.error(f"Manual scan failed: {e}", exc_info=True)
            self.notifier.send(f"❌ Scraping failed: {e}", chat_id)
            return
        if report.degraded:
            self.notifier.send("⚠️ Database unavailable: snapshot saved to local file only", chat_id)

    def start_scan(self, chat_id: str) -> None:
        if self.coordinator.is_running:
            self.notifier.send(ALREADY_RUNNING_TEXT, chat_id)
            return
        self.notifier.send("🚀 Starting VC portfolio scraping...", chat_id)
        self._spawn(lambda: self._manual_scan(chat_id))

    def handle_command(self, text: str, chat_id: str) -> None:
        command = (text or "").strip().lower().split("@", 1)[0]
        if command in ("/start", "/help"):
            self.notifier.send(HELP_TEXT, chat_id)
        elif command in ("/source", "/start_scraping"):
            self.start_scan(chat_id)
        elif command == "/status":
            self.notifier.send(self.status_text(), chat_id)
        elif command.startswith("/"):
            self.notifier.send(UNKNOWN_COMMAND_TEXT, chat_id)

    def process_update(self, update: Dict[str, Any]) -> None:
        update_id = update.get("update_id")
        if isinstance(update_id, int):
            self.offset = max(self.offset, update_id + 1)
        message = update.get("message") or {}
        text = message.get("text")
        if not text:
            return
        chat_id = str((message.get("chat") or {}).get("id", ""))
        user = message.get("from") or {}
        username = user.get("first_name") or user.get("username") or "User"
        logger.info(f"Command from {username} in chat {chat_id}: {text}")
        try:
            self.handle_command(text, chat_id)
        except Exception as e:
            logger.error(f"Error handling command {text!r}: {e}")

    def poll_once(self) -> int:
        updates = self.notifier.get_updates(self.offset)
        for update in updates:
            self.process_update(update)
        return len(updates)

    def run_forever(self, *, idle_sleep: float = 1.0, error_sleep: float = 5.0) -> None:
        self.running = True
        logger.info("Starting Telegram bot polling...")
        while self.running:
            try:
                self.poll_once()
                time.sleep(idle_sleep)
            except Exception as e:
                logger.error(f"Polling error: {e}")
                time.sleep(error_sleep)

    def stop(self) -> None:
        self.running = False
