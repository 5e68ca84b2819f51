"""Build a ready-to-run coordinator from a Config."""

from __future__ import annotations

from typing import Optional

from portfoliowatch.config import Config
from portfoliowatch.ingestion.fetchers import DynamicFetcher, SiteFetcher, StaticFetcher
from portfoliowatch.ingestion.interactions import build_interactions
from portfoliowatch.ingestion.sources import configured_sources
from portfoliowatch.notify.telegram import TelegramNotifier
from portfoliowatch.run.coordinator import RunCoordinator
from portfoliowatch.storage.file_snapshots import FileSnapshotStore
from portfoliowatch.storage.postgres_snapshots import PostgresSnapshotRepo
from portfoliowatch.storage.snapshot_store import SnapshotStore


def build_notifier(config: Config) -> TelegramNotifier:
    return TelegramNotifier(
        config.telegram_bot_token,
        config.telegram_chat_id,
        timeout=config.request_timeout,
    )


def build_store(config: Config) -> SnapshotStore:
    primary = PostgresSnapshotRepo(config.database_url) if config.persistence_enabled else None
    return SnapshotStore(primary, FileSnapshotStore(config.snapshot_file))


def build_fetcher(config: Config) -> SiteFetcher:
    interactions = build_interactions(
        settle_ms=config.settle_ms,
        max_scroll_iterations=config.max_scroll_iterations,
    )
    return SiteFetcher(
        static=StaticFetcher(timeout=config.static_timeout),
        dynamic=DynamicFetcher(
            timeout=config.dynamic_timeout,
            settle_ms=config.settle_ms,
            interactions=interactions,
        ),
    )


def build_coordinator(config: Config, notifier: Optional[TelegramNotifier] = None) -> RunCoordinator:
    return RunCoordinator(
        configured_sources(config.sources_file, static_only=config.static_only),
        build_fetcher(config),
        build_store(config),
        notifier or build_notifier(config),
        inter_source_delay=config.inter_source_delay,
    )
