"""Shared source configuration types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RenderMode(str, Enum):
    STATIC = "static"
    DYNAMIC = "dynamic"


class Interaction(str, Enum):
    """How to reveal content hidden behind a control or lazy loading."""

    NONE = "none"
    LOAD_MORE = "load-more"
    INFINITE_SCROLL = "infinite-scroll"


@dataclass(frozen=True)
class Source:
    """One configured portfolio page.

    ``url`` is the canonical identifier used as the snapshot key.
    """

    url: str
    mode: RenderMode = RenderMode.STATIC
    interaction: Interaction = Interaction.NONE
    label: Optional[str] = None

    @property
    def is_dynamic(self) -> bool:
        return self.mode is RenderMode.DYNAMIC
