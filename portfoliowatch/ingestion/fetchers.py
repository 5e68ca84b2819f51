"""Fetch the rendered markup of a portfolio source.

Static pages are a single requests GET. Dynamic pages are rendered in a
headless Chromium (Playwright sync API), one isolated browser per fetch,
closed on every path before the next source is attempted.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import requests
from playwright.sync_api import sync_playwright

from portfoliowatch.ingestion.interactions import PageInteraction, build_interactions
from portfoliowatch.ingestion.source_types import Interaction, RenderMode, Source

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

BROWSER_HEADERS = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
}

CHROMIUM_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


class FetchError(RuntimeError):
    """Raised when a source could not be retrieved."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class StaticFetcher:
    def __init__(self, timeout: int = 30, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, source: Source) -> str:
        logger.info(f"Scraping static site: {source.url}")
        try:
            resp = self.session.get(source.url, headers=BROWSER_HEADERS, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise FetchError(source.url, f"timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise FetchError(source.url, f"request failed: {e}") from e
        if not 200 <= resp.status_code < 300:
            raise FetchError(source.url, f"http_{resp.status_code}")
        return resp.text


class DynamicFetcher:
    def __init__(
        self,
        timeout: int = 60,
        settle_ms: int = 2000,
        interactions: Optional[Dict[Interaction, PageInteraction]] = None,
        playwright_factory: Callable[[], Any] = sync_playwright,
    ):
        self.timeout_ms = int(timeout * 1000)
        self.settle_ms = settle_ms
        self.interactions = interactions or build_interactions(settle_ms=settle_ms)
        self.playwright_factory = playwright_factory

    def _interact(self, page: Any, source: Source) -> None:
        strategy = self.interactions.get(source.interaction)
        if strategy is None:
            logger.warning(f"No interaction strategy for {source.interaction} ({source.url})")
            return
        try:
            strategy.apply(page, source.url)
        except Exception as e:
            # Whatever was revealed so far is still worth reading.
            logger.warning(f"Error during dynamic loading for {source.url}: {e}")

    def fetch(self, source: Source) -> str:
        logger.info(f"Scraping dynamic site: {source.url}")
        with self.playwright_factory() as p:
            browser = p.chromium.launch(headless=True, args=CHROMIUM_ARGS)
            try:
                page = browser.new_page(user_agent=BROWSER_USER_AGENT)
                try:
                    page.goto(source.url, wait_until="networkidle", timeout=self.timeout_ms)
                except Exception as e:
                    raise FetchError(source.url, f"navigation failed: {e}") from e
                page.wait_for_timeout(self.settle_ms)
                self._interact(page, source)
                return page.content()
            finally:
                browser.close()


class SiteFetcher:
    """Dispatch on the source's rendering mode."""

    def __init__(self, static: Optional[StaticFetcher] = None, dynamic: Optional[DynamicFetcher] = None):
        self.static = static or StaticFetcher()
        self.dynamic = dynamic or DynamicFetcher()

    def fetch(self, source: Source) -> str:
        if source.mode is RenderMode.DYNAMIC:
            return self.dynamic.fetch(source)
        return self.static.fetch(source)
