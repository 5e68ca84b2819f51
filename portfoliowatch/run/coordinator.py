"""Run coordinator: fetch, extract and diff every source, then report.

One run walks the configured sources strictly in order. A failure in one
source (network, timeout, bad markup, anything) is logged and recorded; it
never stops the remaining sources and never touches that source's stored
snapshot. The snapshot is persisted once at the end and a single digest is
sent.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from portfoliowatch.briefs.digest import DIGEST_LIMIT, NewDeal, format_digest
from portfoliowatch.extraction.page_extractor import extract_names
from portfoliowatch.ingestion.source_types import Source
from portfoliowatch.ingestion.sources import source_label
from portfoliowatch.storage.snapshot_store import Snapshot, SnapshotStore

logger = logging.getLogger(__name__)

Extractor = Callable[[str, str], Sequence[str]]


class RunAlreadyInProgress(RuntimeError):
    """Raised when run() is called while another run is still executing."""


@dataclass
class RunReport:
    started_at: datetime
    total_new_deals: int = 0
    per_source_counts: Dict[str, int] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)
    new_deals: List[NewDeal] = field(default_factory=list)
    empty_sources: List[str] = field(default_factory=list)
    persisted_primary: bool = False
    persisted_fallback: bool = False
    primary_configured: bool = True
    total_sources: int = 0
    total_names: int = 0
    digest: str = ""
    duration_s: float = 0.0

    @property
    def degraded(self) -> bool:
        return self.primary_configured and not self.persisted_primary


def diff_names(extracted: Sequence[str], existing: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Return (current, new): sorted unique names and the ones not in ``existing``."""
    current = sorted(set(extracted))
    known = set(existing or ())
    return current, [n for n in current if n not in known]


class RunCoordinator:
    def __init__(
        self,
        sources: Sequence[Source],
        fetcher,
        store: SnapshotStore,
        notifier=None,
        *,
        extractor: Extractor = extract_names,
        inter_source_delay: float = 1.0,
        digest_limit: int = DIGEST_LIMIT,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.sources = list(sources)
        self.fetcher = fetcher
        self.store = store
        self.notifier = notifier
        self.extractor = extractor
        self.inter_source_delay = inter_source_delay
        self.digest_limit = digest_limit
        self._sleep = sleep
        self._run_lock = threading.Lock()
        self.last_report: Optional[RunReport] = None

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def run(self, destination: Optional[str] = None) -> RunReport:
        if not self._run_lock.acquire(blocking=False):
            logger.warning("Run requested while another run is in progress; rejected")
            raise RunAlreadyInProgress("a scan is already running")
        try:
            report = self._run(destination)
            self.last_report = report
            return report
        finally:
            self._run_lock.release()

    def _scan_source(self, source: Source) -> List[str]:
        html = self.fetcher.fetch(source)
        return list(self.extractor(html, source.url))

    def _run(self, destination: Optional[str]) -> RunReport:
        start = time.monotonic()
        report = RunReport(started_at=datetime.now(timezone.utc))
        logger.info(f"Portfolio scan started ({len(self.sources)} sources)")

        self.store.open()
        try:
            existing: Snapshot = self.store.load_all()
            snapshot: Snapshot = {url: list(names) for url, names in existing.items()}

            for i, source in enumerate(self.sources):
                if i > 0 and self.inter_source_delay > 0:
                    self._sleep(self.inter_source_delay)
                try:
                    names = self._scan_source(source)
                except Exception as e:
                    logger.error(f"Error scraping {source.url}: {e}", exc_info=logger.isEnabledFor(logging.DEBUG))
                    report.failures[source.url] = str(e) or type(e).__name__
                    report.per_source_counts[source.url] = 0
                    continue

                if not names:
                    logger.warning(f"No data found on {source.url}")
                    report.empty_sources.append(source.url)
                    report.per_source_counts[source.url] = 0
                    continue

                current, new = diff_names(names, existing.get(source.url, []))
                snapshot[source.url] = current
                report.per_source_counts[source.url] = len(new)
                if new:
                    label = source_label(source)
                    logger.info(f"[{source.url}] {len(new)} new projects: {', '.join(new)}")
                    report.new_deals.extend(NewDeal(name=n, source=label) for n in new)
                else:
                    logger.info(f"[{source.url}] No new projects")
                logger.info(f"Total: {len(current)} projects for {source.url}")

            saved = self.store.save_all(snapshot)
            report.persisted_primary = saved.primary
            report.persisted_fallback = saved.fallback
            report.primary_configured = saved.primary_configured
            if saved.degraded:
                logger.warning("Snapshot not persisted to the database; state carried by the local file only")
            if not saved.fallback:
                logger.error("Snapshot fallback file could not be written")
        finally:
            self.store.close()

        report.total_new_deals = len(report.new_deals)
        report.total_sources = len(snapshot)
        report.total_names = sum(len(v) for v in snapshot.values())
        report.digest = format_digest(
            report.new_deals,
            limit=self.digest_limit,
            total_sources=report.total_sources,
            total_names=report.total_names,
            failures=report.failures,
        )
        report.duration_s = time.monotonic() - start
        logger.info(
            f"Statistics: {report.total_sources} sites, {report.total_names} total projects, "
            f"{report.total_new_deals} new, {len(report.failures)} failed ({report.duration_s:.1f}s)"
        )
        self._notify(report.digest, destination)
        return report

    def _notify(self, message: str, destination: Optional[str]) -> None:
        if self.notifier is None:
            return
        try:
            if not self.notifier.send(message, destination):
                logger.error("Digest notification was not delivered")
        except Exception as e:
            logger.error(f"Error sending digest notification: {e}")
