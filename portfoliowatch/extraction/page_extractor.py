"""Candidate-name extraction from a rendered portfolio page."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from bs4 import BeautifulSoup

from portfoliowatch.extraction.acceptance import AcceptanceRule, rule_for
from portfoliowatch.extraction.name_filter import clean_name

logger = logging.getLogger(__name__)

MAX_NAMES_PER_SOURCE = 100

# Applied in order; earlier selectors win the discovery order.
NAME_SELECTORS: Sequence[str] = (
    "h1, h2, h3, h4, h5, h6",
    'a[href*="/portfolio"], a[href*="/companies"], a[href*="/investments"]',
    ".portfolio-item, .company-item, .investment-item",
    ".project-name, .company-name, .startup-name",
    "li",
    "strong, b",
    '[class*="portfolio"], [class*="company"], [class*="project"], [class*="investment"]',
    "span",
)


def candidate_names(html: str, selectors: Sequence[str] = NAME_SELECTORS) -> List[str]:
    """Unique cleaned names in discovery order, before any per-source rule."""
    soup = BeautifulSoup(html, "html.parser")
    found: Dict[str, None] = {}
    for selector in selectors:
        for element in soup.select(selector):
            name = clean_name(element.get_text())
            if name:
                found.setdefault(name, None)
    return list(found)


def extract_names(
    html: str,
    source_id: str,
    *,
    rule: Optional[AcceptanceRule] = None,
    limit: int = MAX_NAMES_PER_SOURCE,
) -> List[str]:
    """Extract up to ``limit`` unique candidate names for ``source_id``.

    The result has set semantics (no duplicates); order is discovery order
    and only matters for which names survive the cap.
    """
    if not isinstance(html, str):
        raise TypeError(f"expected HTML text, got {type(html).__name__}")
    names = candidate_names(html)
    active = rule or rule_for(source_id)
    kept = [n for n in names if active.accepts(n)]
    if len(kept) > limit:
        logger.info(f"[{source_id}] {len(kept)} names found, keeping first {limit}")
    return kept[:limit]
