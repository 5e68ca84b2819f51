"""Run digest: the single human-readable message sent after each scan."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

DIGEST_LIMIT = 10
NO_NEW_DEALS_MESSAGE = "📊 No new deals, go source on X!"


@dataclass(frozen=True)
class NewDeal:
    """A name seen for the first time in this run; never persisted."""

    name: str
    source: str

    def __str__(self) -> str:
        return f"{self.name} ({self.source})"


def format_digest(
    new_deals: Sequence[NewDeal],
    *,
    limit: int = DIGEST_LIMIT,
    total_sources: Optional[int] = None,
    total_names: Optional[int] = None,
    failures: Optional[Mapping[str, str]] = None,
) -> str:
    if new_deals:
        lines = [f"🚀 {len(new_deals)} new deals found:"]
        lines.extend(str(d) for d in new_deals[:limit])
        extra = len(new_deals) - limit
        if extra > 0:
            lines.append(f"+{extra} more")
        message = "\n".join(lines)
    else:
        message = NO_NEW_DEALS_MESSAGE

    footer = []
    if total_sources is not None and total_names is not None:
        footer.append(f"📊 Statistics: {total_sources} sites, {total_names} total projects")
    if failures:
        footer.append(f"⚠️ {len(failures)} source(s) failed this run")
    if footer:
        message += "\n\n" + "\n".join(footer)
    return message
