"""Plain-text snapshot fallback.

Format (UTF-8)::

    https://example.vc/portfolio
    Alpha
    Beta

    https://other.vc/companies
    Gamma

Each block is a URL line, one name per line in sorted order, then a blank
line. Lines starting with ``http://`` or ``https://`` open a new block.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

logger = logging.getLogger(__name__)

_BLOCK_HEADER_RE = re.compile(r"^https?://", re.IGNORECASE)


def dumps(snapshot: Mapping[str, Sequence[str]]) -> str:
    parts: List[str] = []
    for url, names in snapshot.items():
        parts.append(f"{url}\n")
        for name in sorted(set(names)):
            parts.append(f"{name}\n")
        parts.append("\n")
    return "".join(parts)


def loads(content: str) -> Dict[str, List[str]]:
    data: Dict[str, List[str]] = {}
    current = ""
    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue
        if _BLOCK_HEADER_RE.match(trimmed):
            current = trimmed
            data.setdefault(current, [])
        elif current:
            data[current].append(trimmed)
    return data


class FileSnapshotStore:
    def __init__(self, path: str = "vc_portfolio_data.txt"):
        self.path = path

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> Dict[str, List[str]]:
        if not self.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = loads(f.read())
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error loading snapshot file {self.path}: {e}")
            return {}
        logger.info(f"Snapshot loaded from local file {self.path} ({len(data)} sources)")
        return data

    def save(self, snapshot: Mapping[str, Sequence[str]]) -> bool:
        target = Path(self.path)
        tmp = target.with_name(target.name + ".tmp")
        try:
            if target.parent and not target.parent.exists():
                target.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(dumps(snapshot))
            os.replace(tmp, target)
            return True
        except OSError as e:
            logger.error(f"Error saving snapshot file {self.path}: {e}")
            return False
