"""Per-source acceptance rules applied after the generic name filter.

Some portfolio sites leak recurring noise (filter widgets, legal
disclaimers, category tags) that the generic filter lets through. Rules are
registered per domain so adding a site's quirks is a table entry rather than
another branch in the extractor.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, Pattern
from urllib.parse import urlparse


class AcceptanceRule:
    """Decides whether a cleaned candidate name is kept for a source."""

    def accepts(self, name: str) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class DefaultAcceptance(AcceptanceRule):
    min_length: int = 3
    max_tokens: int = 3

    def accepts(self, name: str) -> bool:
        return len(name) >= self.min_length and len(name.split(" ")) <= self.max_tokens


@dataclass(frozen=True)
class ExclusionAcceptance(AcceptanceRule):
    """Reject names containing any excluded word; no token limit."""

    excluded: Pattern[str]
    min_length: int = 3

    @classmethod
    def from_words(cls, words: Iterable[str], *, min_length: int = 3) -> "ExclusionAcceptance":
        pattern = re.compile(r"\b(?:" + "|".join(re.escape(w) for w in words) + r")\b", re.IGNORECASE)
        return cls(excluded=pattern, min_length=min_length)

    def accepts(self, name: str) -> bool:
        return len(name) >= self.min_length and not self.excluded.search(name)


DEFAULT_RULE: AcceptanceRule = DefaultAcceptance()

_RULES: Dict[str, AcceptanceRule] = {}


def _host(source_id: str) -> str:
    host = (urlparse(source_id or "").hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


def register_rule(domain: str, rule: AcceptanceRule) -> None:
    """Register ``rule`` for ``domain`` and all of its subdomains."""
    _RULES[domain.lower().strip()] = rule


def unregister_rule(domain: str) -> None:
    _RULES.pop(domain.lower().strip(), None)


def rule_for(source_id: str) -> AcceptanceRule:
    host = _host(source_id)
    if host:
        for domain, rule in _RULES.items():
            if host == domain or host.endswith("." + domain):
                return rule
    return DEFAULT_RULE


def registered_domains() -> Dict[str, AcceptanceRule]:
    return dict(_RULES)


# Observed noise on specific sites
register_rule(
    "sequoiacap.com",
    ExclusionAcceptance.from_words(["close", "filter", "clear", "apply", "category", "stage", "partner"]),
)
register_rule(
    "paradigm.xyz",
    ExclusionAcceptance.from_words(["portfolio", "featured", "investments", "protocol", "exchange", "wallet", "platform"]),
)
register_rule(
    "a16zcrypto.com",
    ExclusionAcceptance.from_words([
        "acquired", "companies", "undergone", "initial", "public", "offering", "shares", "certain", "publicly",
        "traded", "held", "funds", "available", "excluded", "investments", "issuer", "provided", "permission",
        "disclose", "unannounced", "digital", "assets", "updated", "monthly",
    ]),
)
