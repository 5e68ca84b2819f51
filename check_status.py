#!/usr/bin/env python3
"""
Quick status check for the Portfolio Watch deployment
"""

import os
import sys
from datetime import datetime

from dotenv import load_dotenv

from portfoliowatch.extraction.acceptance import registered_domains
from portfoliowatch.ingestion.sources import configured_sources
from portfoliowatch.storage.file_snapshots import FileSnapshotStore
from portfoliowatch.storage.postgres_snapshots import PostgresSnapshotRepo


def check_env():
    """Check required environment configuration"""
    print("📋 Checking Configuration")
    print("-" * 40)

    token = os.getenv("TELEGRAM_BOT_TOKEN", "")
    chat_id = os.getenv("TELEGRAM_CHAT_ID", "")
    db_url = os.getenv("DATABASE_URL") or os.getenv("POSTGRES_URL") or os.getenv("PG_DSN") or ""

    print(f"  Telegram Bot Token: {'✅' if token.count(':') == 1 else '❌'}")
    print(f"  Telegram Chat ID: {'✅' if chat_id else '❌'}")
    print(f"  Database URL: {'✅' if db_url else '⚠️  not set (file fallback only)'}")
    return bool(token) and bool(chat_id)


def check_database():
    """Check that the snapshot table is reachable"""
    print("\n🗄️  Checking Database")
    print("-" * 40)

    db_url = os.getenv("DATABASE_URL") or os.getenv("POSTGRES_URL") or os.getenv("PG_DSN") or ""
    if not db_url:
        print("  Skipped (no DATABASE_URL)")
        return
    repo = PostgresSnapshotRepo(db_url)
    if not repo.connect():
        print("  ❌ Connection failed")
        return
    try:
        data = repo.load_all() or {}
        print(f"  ✅ Connected: {len(data)} sources, {sum(len(v) for v in data.values())} names")
    finally:
        repo.close()


def check_snapshot_file():
    """Check the local fallback file"""
    print("\n📝 Checking Snapshot File")
    print("-" * 40)

    store = FileSnapshotStore(os.getenv("SNAPSHOT_FILE", "vc_portfolio_data.txt"))
    if not store.exists():
        print(f"  ⚠️  {store.path} not found (created after the first scan)")
        return
    data = store.load()
    mtime = os.path.getmtime(store.path)
    print(f"  ✅ {store.path}: {len(data)} sources, last written {datetime.fromtimestamp(mtime):%Y-%m-%d %H:%M}")


def check_sources():
    """Summarize the configured sources"""
    print("\n🌐 Configured Sources")
    print("-" * 40)

    sources = configured_sources(
        os.getenv("SOURCES_FILE", ""),
        static_only=os.getenv("STATIC_ONLY", "false").lower() == "true",
    )
    dynamic = sum(1 for s in sources if s.is_dynamic)
    print(f"  {len(sources)} sources ({len(sources) - dynamic} static, {dynamic} dynamic)")
    print(f"  Site-specific filters: {', '.join(sorted(registered_domains())) or 'none'}")


def main():
    load_dotenv()
    print("🔍 Portfolio Watch Status Check")
    print("=" * 40)
    ok = check_env()
    check_database()
    check_snapshot_file()
    check_sources()
    print()
    print("✅ Ready" if ok else "❌ Missing required configuration")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
