"""
Search configuration, loaded from environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

from .engine import clamp_max_results, clamp_snippet_limit


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36"
)


@dataclass
class SearchConfig:
    """Fetch + extraction settings."""

    search_url: str = "https://www.google.com/search"
    timeout_seconds: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    language: str = "ja"  # hl= parameter
    accept_language: str = "ja,en-US;q=0.9,en;q=0.8"

    max_results: int = 10
    snippet_limit: int = 300
    tier_threshold: int = 3  # fewer accepted results than this unlocks the next tier
    extra_deny: List[str] = field(default_factory=list)

    log_level: str = "INFO"

    def __post_init__(self):
        self.max_results = clamp_max_results(self.max_results)
        self.snippet_limit = clamp_snippet_limit(self.snippet_limit)

    @classmethod
    def from_env(cls) -> SearchConfig:
        """Load configuration from environment variables."""
        defaults = cls()
        extra = os.getenv("SEARCH_EXTRA_DENY", "")
        return cls(
            search_url=os.getenv("SEARCH_URL", defaults.search_url),
            timeout_seconds=float(os.getenv("SEARCH_TIMEOUT", str(defaults.timeout_seconds))),
            user_agent=os.getenv("SEARCH_USER_AGENT", defaults.user_agent),
            language=os.getenv("SEARCH_LANGUAGE", defaults.language),
            accept_language=os.getenv("SEARCH_ACCEPT_LANGUAGE", defaults.accept_language),
            max_results=int(os.getenv("SEARCH_MAX_RESULTS", str(defaults.max_results))),
            snippet_limit=int(os.getenv("SEARCH_SNIPPET_LIMIT", str(defaults.snippet_limit))),
            tier_threshold=int(os.getenv("SEARCH_TIER_THRESHOLD", str(defaults.tier_threshold))),
            extra_deny=[d.strip() for d in extra.split(",") if d.strip()],
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        )

    @property
    def headers(self) -> dict:
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": self.accept_language,
        }
