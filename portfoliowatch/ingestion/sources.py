"""Configured portfolio sources and their human labels."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlparse

from portfoliowatch.ingestion.source_types import Interaction, RenderMode, Source

logger = logging.getLogger(__name__)


SOURCE_LABELS: Dict[str, str] = {
    "haun.co": "Haun Ventures",
    "hashkey.capital": "HashKey Capital",
    "greenfield.xyz": "Greenfield One",
    "fabric.vc": "Fabric Ventures",
    "dewhales.com": "DeWhales Capital",
    "mhventures.io": "MH Ventures",
    "multicoin.capital": "Multicoin Capital",
    "wintermute.com": "Wintermute Ventures",
    "alliance.xyz": "Alliance",
    "gmcapital.xyz": "GM Capital",
    "nativecrypto.xyz": "Native Crypto",
    "stake.capital": "Stake Capital",
    "shima.capital": "Shima Capital",
    "nlh.xyz": "NLH",
    "framework.ventures": "Framework Ventures",
    "delphiventures.io": "Delphi Ventures",
    "fomo.ventures": "FOMO Ventures",
    "panteracapital.com": "Pantera Capital",
    "polychain.capital": "Polychain Capital",
    "paradigm.xyz": "Paradigm",
    "sequoiacap.com": "Sequoia Capital",
    "moonrockcapital.io": "Moonrock Capital",
    "6thman.ventures": "6th Man Ventures",
    "bankless.ventures": "Bankless Ventures",
    "a16zcrypto.com": "a16z crypto",
}


def _static(url: str) -> Source:
    return Source(url=url, mode=RenderMode.STATIC)


def _dynamic(url: str, interaction: Interaction = Interaction.NONE) -> Source:
    return Source(url=url, mode=RenderMode.DYNAMIC, interaction=interaction)


def default_sources() -> List[Source]:
    """Curated source list, static pages first."""
    return [
        _static("https://www.haun.co/portfolio"),
        _static("https://hashkey.capital/portfolio/index.html"),
        _static("https://greenfield.xyz/portfolio/"),
        _static("https://www.fabric.vc/portfolio"),
        _static("https://www.dewhales.com/portfolio"),
        _static("https://www.mhventures.io/portfolio"),
        _static("https://multicoin.capital/portfolio/"),
        _static("https://www.wintermute.com/ventures/portfolio"),
        _static("https://alliance.xyz/companies"),
        _static("https://gmcapital.xyz/"),
        _static("https://nativecrypto.xyz/"),
        _static("https://nativecrypto.xyz/cc/"),
        _static("https://www.stake.capital/"),
        _static("https://shima.capital/investments"),
        _dynamic("https://nlh.xyz/#portfolio"),
        _dynamic("https://www.framework.ventures/portfolio", Interaction.LOAD_MORE),
        _dynamic("https://delphiventures.io/portfolio", Interaction.LOAD_MORE),
        _dynamic("https://www.fomo.ventures/portfolio"),
        _dynamic("https://panteracapital.com/portfolio/"),
        _dynamic("https://jobs.polychain.capital/companies"),
        _dynamic("https://www.paradigm.xyz/portfolio"),
        _dynamic("https://www.sequoiacap.com/our-companies/"),
        _dynamic("https://www.moonrockcapital.io/portfolio"),
        _dynamic("https://6thman.ventures/#portfolio", Interaction.INFINITE_SCROLL),
        _dynamic("https://www.bankless.ventures/#Portfolio", Interaction.INFINITE_SCROLL),
        _dynamic("https://a16zcrypto.com/portfolio/"),
    ]


def source_label(source: Any) -> str:
    """Human label for a Source or URL; falls back to the bare host name."""
    if isinstance(source, Source):
        if source.label:
            return source.label
        url = source.url
    else:
        url = str(source or "")
    host = (urlparse(url).hostname or "").lower()
    for domain, label in SOURCE_LABELS.items():
        if host == domain or host.endswith("." + domain):
            return label
    if host.startswith("www."):
        host = host[4:]
    return host.split(".")[0] if host else "Unknown VC"


def _parse_record(rec: Any) -> Optional[Source]:
    if isinstance(rec, str):
        return _static(rec.strip()) if rec.strip() else None
    if not isinstance(rec, dict):
        return None
    url = str(rec.get("url") or "").strip()
    if not url:
        return None
    mode = RenderMode(str(rec.get("mode") or RenderMode.STATIC.value).lower())
    interaction = Interaction(str(rec.get("interaction") or Interaction.NONE.value).lower())
    label = rec.get("label") or None
    return Source(url=url, mode=mode, interaction=interaction, label=label)


def load_sources_file(path: str) -> List[Source]:
    """Load an ordered source list from JSON.

    Accepts a list of URLs (static) or of objects with ``url``, ``mode``,
    ``interaction`` and optional ``label``. Invalid records raise ValueError.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("sources") or []
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of sources")
    out: List[Source] = []
    seen = set()
    for i, rec in enumerate(data):
        src = _parse_record(rec)
        if src is None:
            raise ValueError(f"{path}: invalid source record at index {i}")
        if src.url in seen:
            logger.warning(f"Duplicate source {src.url} in {path}, keeping the first")
            continue
        seen.add(src.url)
        out.append(src)
    return out


def configured_sources(sources_file: str = "", *, static_only: bool = False) -> List[Source]:
    sources: Sequence[Source] = load_sources_file(sources_file) if sources_file else default_sources()
    if static_only:
        skipped = [s.url for s in sources if s.is_dynamic]
        if skipped:
            logger.info(f"Static-only mode: skipping {len(skipped)} dynamic sources")
        sources = [s for s in sources if not s.is_dynamic]
    return list(sources)
