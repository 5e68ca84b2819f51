"""Runtime configuration and logging setup.

Everything is read from the environment (optionally populated from a .env
file). Only the Telegram credentials are mandatory; the rest have defaults
suited to a small always-on deployment.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(log_file: str = "scanner.log", level: str = "INFO") -> None:
    """Log to a file and to stdout, like every other entry point."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    """Scanner configuration with validation"""

    telegram_bot_token: str
    telegram_chat_id: str

    # Persistence
    database_url: str = ""
    snapshot_file: str = "vc_portfolio_data.txt"

    # Sources
    sources_file: str = ""
    static_only: bool = False

    # Fetching
    static_timeout: int = 30  # seconds
    dynamic_timeout: int = 60  # seconds
    settle_ms: int = 2000
    max_scroll_iterations: int = 20
    inter_source_delay: float = 1.0

    # Scheduling
    scan_interval_hours: float = 2.0
    initial_delay_seconds: int = 30

    # Notifications
    request_timeout: int = 30

    # Logging
    log_file: str = "scanner.log"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "Config":
        """Load and validate configuration from environment variables"""
        if dotenv:
            load_dotenv()
        config = cls(
            telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN", "").strip(),
            telegram_chat_id=os.getenv("TELEGRAM_CHAT_ID", "").strip(),
            database_url=(
                os.getenv("DATABASE_URL")
                or os.getenv("POSTGRES_URL")
                or os.getenv("PG_DSN")
                or ""
            ).strip(),
            snapshot_file=os.getenv("SNAPSHOT_FILE", "vc_portfolio_data.txt"),
            sources_file=os.getenv("SOURCES_FILE", "").strip(),
            static_only=_env_bool("STATIC_ONLY"),
            static_timeout=int(os.getenv("STATIC_TIMEOUT", "30")),
            dynamic_timeout=int(os.getenv("DYNAMIC_TIMEOUT", "60")),
            settle_ms=int(os.getenv("SETTLE_MS", "2000")),
            max_scroll_iterations=int(os.getenv("MAX_SCROLL_ITERATIONS", "20")),
            inter_source_delay=float(os.getenv("INTER_SOURCE_DELAY", "1.0")),
            scan_interval_hours=float(os.getenv("SCAN_INTERVAL_HOURS", "2")),
            initial_delay_seconds=int(os.getenv("INITIAL_DELAY_SECONDS", "30")),
            request_timeout=int(os.getenv("REQUEST_TIMEOUT", "30")),
            log_file=os.getenv("LOG_FILE", "scanner.log"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
        config._validate()
        return config

    @property
    def persistence_enabled(self) -> bool:
        return bool(self.database_url)

    def _validate(self) -> None:
        errors = []

        if not self.telegram_bot_token:
            errors.append("TELEGRAM_BOT_TOKEN is required")
        elif self.telegram_bot_token.count(":") != 1:
            errors.append("Invalid Telegram bot token format")

        if not self.telegram_chat_id:
            errors.append("TELEGRAM_CHAT_ID is required")

        if self.static_timeout < 1 or self.static_timeout > 300:
            errors.append("STATIC_TIMEOUT should be between 1 and 300 seconds")
        if self.dynamic_timeout < 1 or self.dynamic_timeout > 600:
            errors.append("DYNAMIC_TIMEOUT should be between 1 and 600 seconds")
        if self.settle_ms < 0:
            errors.append("SETTLE_MS must not be negative")
        if self.max_scroll_iterations < 1:
            errors.append("MAX_SCROLL_ITERATIONS must be at least 1")
        if self.inter_source_delay < 0:
            errors.append("INTER_SOURCE_DELAY must not be negative")
        if self.scan_interval_hours <= 0:
            errors.append("SCAN_INTERVAL_HOURS must be positive")
        if self.initial_delay_seconds < 0:
            errors.append("INITIAL_DELAY_SECONDS must not be negative")

        if errors:
            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in errors)
            raise ValueError(error_msg)

        if not self.persistence_enabled:
            logger.warning("No DATABASE_URL found, snapshots will be kept in %s only", self.snapshot_file)
        logger.info("Configuration validated successfully")

    def masked_token(self) -> Optional[str]:
        tok = self.telegram_bot_token
        if not tok:
            return None
        return f"{tok[:6]}...{tok[-4:]}" if len(tok) > 12 else "***"
