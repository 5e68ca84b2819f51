"""Postgres schema management for portfolio snapshots.

Schema creation is idempotent (CREATE IF NOT EXISTS) so it can run on every
connect.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional


SCHEMA_STATEMENTS: list[str] = [
    """
    CREATE TABLE IF NOT EXISTS portfolio_snapshots (
      id BIGSERIAL PRIMARY KEY,
      source_url TEXT UNIQUE NOT NULL,
      names JSONB NOT NULL,
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_portfolio_snapshots_updated_at ON portfolio_snapshots (updated_at DESC);",
]


def ensure_postgres_schema(conn: Any, *, statements: Optional[Iterable[str]] = None) -> None:
    """Ensure the snapshot table exists on an open psycopg connection."""
    stmts = list(statements) if statements is not None else SCHEMA_STATEMENTS
    with conn.cursor() as cur:
        for s in stmts:
            cur.execute(s)
