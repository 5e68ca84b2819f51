"""Page interactions that reveal more portfolio entries before reading the DOM.

Strategies are a closed set keyed by ``Interaction``; the dynamic fetcher
looks one up per source instead of matching on URLs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Sequence

from portfoliowatch.ingestion.source_types import Interaction

logger = logging.getLogger(__name__)

LOAD_MORE_SELECTORS: Sequence[str] = (
    'button:has-text("Load More")',
    'button:has-text("Show More")',
    ".load-more",
    '[class*="load-more"]',
    'button:has-text("View All")',
)

SCROLL_HEIGHT_JS = "() => document.body.scrollHeight"
SCROLL_TO_BOTTOM_JS = "() => window.scrollTo(0, document.body.scrollHeight)"


class PageInteraction:
    def apply(self, page: Any, url: str) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class NoInteraction(PageInteraction):
    def apply(self, page: Any, url: str) -> None:
        return None


@dataclass(frozen=True)
class LoadMoreInteraction(PageInteraction):
    """Click the first matching load-more control once, then let it settle."""

    selectors: Sequence[str] = LOAD_MORE_SELECTORS
    settle_ms: int = 2000

    def apply(self, page: Any, url: str) -> bool:
        for selector in self.selectors:
            try:
                button = page.query_selector(selector)
                if not button:
                    continue
                button.click()
                page.wait_for_timeout(self.settle_ms)
                logger.info(f"Clicked load-more control ({selector}) on {url}")
                return True
            except Exception as e:
                logger.debug(f"Load-more selector {selector} failed on {url}: {e}")
        logger.info(f"No load-more control found on {url}")
        return False


@dataclass(frozen=True)
class InfiniteScrollInteraction(PageInteraction):
    """Scroll to the bottom until the document height stops changing."""

    settle_ms: int = 2000
    max_iterations: int = 20

    def apply(self, page: Any, url: str) -> int:
        """Returns the number of scrolls performed."""
        height = page.evaluate(SCROLL_HEIGHT_JS)
        for i in range(1, self.max_iterations + 1):
            page.evaluate(SCROLL_TO_BOTTOM_JS)
            page.wait_for_timeout(self.settle_ms)
            new_height = page.evaluate(SCROLL_HEIGHT_JS)
            if new_height == height:
                logger.info(f"Infinite scroll completed for {url} after {i} scrolls")
                return i
            height = new_height
        logger.warning(f"Infinite scroll on {url} stopped after {self.max_iterations} scrolls (height still growing)")
        return self.max_iterations


def build_interactions(*, settle_ms: int = 2000, max_scroll_iterations: int = 20) -> Dict[Interaction, PageInteraction]:
    return {
        Interaction.NONE: NoInteraction(),
        Interaction.LOAD_MORE: LoadMoreInteraction(settle_ms=settle_ms),
        Interaction.INFINITE_SCROLL: InfiniteScrollInteraction(settle_ms=settle_ms, max_iterations=max_scroll_iterations),
    }

