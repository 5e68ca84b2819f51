"""Snapshot store combining the Postgres primary with the file fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from portfoliowatch.storage.file_snapshots import FileSnapshotStore
from portfoliowatch.storage.postgres_snapshots import PostgresSnapshotRepo

logger = logging.getLogger(__name__)

Snapshot = Dict[str, List[str]]


@dataclass(frozen=True)
class SaveResult:
    primary: bool
    fallback: bool
    primary_configured: bool = True

    @property
    def degraded(self) -> bool:
        """A configured database missed this save; file-only setups are never degraded."""
        return self.primary_configured and not self.primary


class SnapshotStore:
    def __init__(self, primary: Optional[PostgresSnapshotRepo], fallback: FileSnapshotStore):
        self.primary = primary
        self.fallback = fallback

    def open(self) -> bool:
        """Connect the primary backend; returns availability."""
        if self.primary is None:
            logger.warning("PostgreSQL not configured, using file fallback")
            return False
        ok = self.primary.connect()
        if ok:
            logger.info("PostgreSQL connected")
        else:
            logger.warning("PostgreSQL not available, using file fallback")
        return ok

    def is_available(self) -> bool:
        return self.primary is not None and self.primary.is_connected

    def load_all(self) -> Snapshot:
        if self.is_available():
            data = self.primary.load_all()
            if data:
                logger.info(f"Snapshot loaded from PostgreSQL ({len(data)} sources)")
                return {url: list(names) for url, names in data.items()}
            if data is None:
                logger.warning("Could not load from database, trying file fallback")
        return self.fallback.load()

    def save_all(self, snapshot: Mapping[str, Sequence[str]]) -> SaveResult:
        primary_ok = False
        if self.is_available():
            primary_ok = self.primary.save_all(snapshot)
            if primary_ok:
                logger.info("Snapshot saved to PostgreSQL")
            else:
                logger.error("Saving snapshot to PostgreSQL failed")
        fallback_ok = self.fallback.save(snapshot)
        if fallback_ok:
            if primary_ok:
                logger.info(f"Snapshot also backed up to {self.fallback.path}")
            else:
                logger.warning(f"Snapshot saved to local file {self.fallback.path} only")
        return SaveResult(primary=primary_ok, fallback=fallback_ok, primary_configured=self.primary is not None)

    def close(self) -> None:
        if self.primary is not None:
            self.primary.close()
