"""Candidate-name cleaning and rejection heuristics.

Portfolio pages mix company names with navigation, legal footers and
marketing copy. This module turns one raw text node into either a short
normalized name or a rejection (``None``). It is deliberately a pure,
deterministic function: the same input always yields the same output.
"""

from __future__ import annotations

import re
from typing import Any, Optional


MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50
MAX_NAME_TOKENS = 4


# -----------------------------
# Whole-string stoplist
# -----------------------------
STOPLIST = {
    # articles, prepositions, adverbs
    "the","and","or","of","in","on","at","to","for","with","by","from","about","into","through","during",
    "before","after","above","below","up","down","out","off","over","under","again","further","then","once",
    "here","there","when","where","why","how","all","any","both","each","few","more","most","other","some",
    "such","no","nor","not","only","own","same","so","than","too","very","can","will","just","should","now",
    # section labels
    "portfolio","company","companies","investment","investments","project","projects","team","teams",
    "startup","startups","jobs","press","contact","disclosures","privacy","twitter","home","blog","news",
    "careers","featured","writing","insights","category","stage","partner",
    # ui chrome
    "login","search","menu","close","open","view","show","load","filter","apply","clear","x","subscribe",
    "newsletter","get","read","explore","discover","learn","find","see","load more","show more","view all",
    "show all","see more","read more","learn more",
    # legal footer
    "terms","conditions","service","cookies","policy","rights","reserved","copyright","legal","disclaimer",
    "faq","help","support",
}

# -----------------------------
# Substring patterns
# -----------------------------
NAVIGATION_PATTERNS = [
    r"\bx twitter\b",
    r"\bfollow us\b",
    r"\bsubscribe\b",
    r"\bnewsletter\b",
    r"\bget in touch\b",
    r"\blearn more\b",
    r"\bread more\b",
    r"\bview all\b",
    r"\bshow all\b",
    r"\bload more\b",
    r"\bsee more\b",
    r"\bexplore\b",
    r"\bdiscover\b",
    r"\bfind out\b",
    r"\bclick here\b",
    r"\bsign up\b",
    r"\blog in\b",
    r"\bregister\b",
    r"\bsubmit\b",
    r"\bcontact us\b",
    r"\babout us\b",
    r"\bour team\b",
    r"\bprivacy policy\b",
    r"\bterms of service\b",
    r"\ball rights reserved\b",
]

DESCRIPTIVE_TERMS = [
    "description", "overview", "summary", "details", "information", "technology", "platform", "protocol",
    "solution", "service", "application", "ecosystem", "network", "infrastructure", "blockchain", "crypto",
    "defi", "nft", "web3", "decentralized", "distributed",
]

_NAVIGATION_RE = re.compile("|".join(NAVIGATION_PATTERNS), re.IGNORECASE)
_DESCRIPTIVE_RE = re.compile(r"\b(?:" + "|".join(DESCRIPTIVE_TERMS) + r")\b", re.IGNORECASE)
_RAW_LINK_RE = re.compile(r"^\s*(?:https?://|@)", re.IGNORECASE)
_DOMAIN_RE = re.compile(r"^http|www\.|\.(?:com|io|xyz)\b", re.IGNORECASE)
_DISALLOWED_RE = re.compile(r"[^\w\s\-.]")
_WHITESPACE_RE = re.compile(r"\s+")
_NUMERIC_RE = re.compile(r"^\d+$")


def normalize_text(text: str) -> str:
    """Strip punctuation (keeping hyphen and period) and collapse whitespace."""
    cleaned = _DISALLOWED_RE.sub(" ", text.strip())
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def rejection_reason(cleaned: str, raw: str = "") -> Optional[str]:
    """Name of the first heuristic that rejects ``cleaned``, or None."""
    if len(cleaned) < MIN_NAME_LENGTH or len(cleaned) > MAX_NAME_LENGTH:
        return "length"
    if len(cleaned.split(" ")) > MAX_NAME_TOKENS:
        return "tokens"
    if cleaned.lower() in STOPLIST:
        return "stoplist"
    if _NAVIGATION_RE.search(cleaned):
        return "navigation"
    if _RAW_LINK_RE.match(raw or "") or _DOMAIN_RE.search(cleaned):
        return "link"
    if _NUMERIC_RE.match(cleaned):
        return "numeric"
    if _DESCRIPTIVE_RE.search(cleaned):
        return "descriptive"
    return None


def clean_name(raw: Any) -> Optional[str]:
    """Return the normalized candidate name for ``raw`` or None if rejected."""
    if not isinstance(raw, str) or not raw.strip():
        return None
    cleaned = normalize_text(raw)
    if rejection_reason(cleaned, raw) is not None:
        return None
    return cleaned
