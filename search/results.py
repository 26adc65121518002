"""
Result value types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class SearchResult:
    """Single search hit, ready for display."""

    title: str
    link: str
    snippet: str = ""
    display_link: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        """Wire shape used by the HTTP boundary."""
        return {
            "title": self.title,
            "link": self.link,
            "snippet": self.snippet,
            "displayLink": self.display_link,
        }


@dataclass(frozen=True)
class Candidate:
    """
    Provisional result produced by a strategy.

    ``title`` and ``snippet`` may still contain markup; the engine
    validates and normalizes them before building a SearchResult.
    """

    title: str
    link: str
    snippet: str = ""
    tier: str = ""
