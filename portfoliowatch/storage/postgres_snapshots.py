"""Primary snapshot backend: one row per source in Postgres.

The repository holds a single connection for the lifetime of a run. When the
database cannot be reached, ``connect()`` records it and every later call is
a no-op returning a sentinel (``None`` / ``False``) instead of raising, so a
run can carry on with the file fallback.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import psycopg
from psycopg.types.json import Jsonb

from portfoliowatch.storage.postgres_schema import ensure_postgres_schema

logger = logging.getLogger(__name__)


class PostgresSnapshotRepo:
    def __init__(self, pg_dsn: str, *, connect_fn: Callable[..., Any] = psycopg.connect):
        self.pg_dsn = pg_dsn
        self._connect_fn = connect_fn
        self._conn: Any = None
        self.is_connected = False

    def connect(self) -> bool:
        if not self.pg_dsn:
            self.is_connected = False
            return False
        try:
            self._conn = self._connect_fn(self.pg_dsn, autocommit=True)
            ensure_postgres_schema(self._conn)
            self.is_connected = True
            logger.info("Database connected successfully")
        except Exception as e:
            logger.error(f"Database connection failed: {e}")
            self._conn = None
            self.is_connected = False
        return self.is_connected

    def load_all(self) -> Optional[Dict[str, List[str]]]:
        if not self.is_connected:
            return None
        try:
            with self._conn.cursor() as cur:
                cur.execute("SELECT source_url, names FROM portfolio_snapshots ORDER BY source_url")
                rows = cur.fetchall()
        except Exception as e:
            logger.error(f"Error loading snapshots from database: {e}")
            return None
        return {str(url): [str(n) for n in (names or [])] for url, names in rows}

    def save_source(self, url: str, names: Sequence[str]) -> bool:
        if not self.is_connected:
            return False
        try:
            with self._conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO portfolio_snapshots (source_url, names, updated_at)
                    VALUES (%s, %s, now())
                    ON CONFLICT (source_url)
                    DO UPDATE SET names = EXCLUDED.names, updated_at = now()
                    """,
                    (url, Jsonb(list(names))),
                )
            return True
        except Exception as e:
            logger.error(f"Error saving snapshot for {url}: {e}")
            return False

    def save_all(self, snapshot: Mapping[str, Sequence[str]]) -> bool:
        if not self.is_connected:
            return False
        ok = True
        for url, names in snapshot.items():
            ok = self.save_source(url, names) and ok
        return ok

    def close(self) -> None:
        if self._conn is not None:
            try:
                self._conn.close()
            except Exception as e:
                logger.warning(f"Error closing database connection: {e}")
        self._conn = None
        self.is_connected = False
