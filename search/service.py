"""
Search service — the request boundary.

Ties together SearchClient and ExtractionEngine into a single call that:

  1. Rejects a missing/blank query (ClientInputError)
  2. Fetches the provider page (UpstreamFetchError on failure)
  3. Extracts results, falling back to synthetic ones when none survive
  4. Produces a SearchOutput with the query, results and count
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .client import SearchClient, get_search_client
from .config import SearchConfig
from .engine import ExtractionEngine, ExtractionReport, TierHook, build_engine
from .errors import ClientInputError
from .results import SearchResult

logger = logging.getLogger(__name__)


@dataclass
class SearchOutput:
    """Complete response for one query."""

    query: str
    results: List[SearchResult] = field(default_factory=list)
    report: Optional[ExtractionReport] = None

    @property
    def count(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict:
        return {
            "query": self.query,
            "results": [r.to_dict() for r in self.results],
            "count": self.count,
        }


class SearchService:
    """
    Fetch-then-extract for one query at a time. Holds no per-request state.

    Usage:
        service = SearchService.from_config(SearchConfig.from_env())
        output = service.search("python dataclasses")
    """

    def __init__(self, client: SearchClient, engine: Optional[ExtractionEngine] = None):
        self._client = client
        self._engine = engine or ExtractionEngine()

    @classmethod
    def from_config(
        cls,
        config: SearchConfig,
        provider: str = "google",
        on_tier: Optional[TierHook] = None,
    ) -> SearchService:
        engine = build_engine(
            extra_deny=config.extra_deny,
            threshold=config.tier_threshold,
            max_results=config.max_results,
            snippet_limit=config.snippet_limit,
            on_tier=on_tier,
        )
        return cls(client=get_search_client(provider, config=config), engine=engine)

    def search(self, query: Optional[str]) -> SearchOutput:
        """
        Raises:
            ClientInputError: query missing or blank
            UpstreamFetchError: provider unreachable / non-2xx
        """
        if query is None or not query.strip():
            raise ClientInputError()

        html = self._client.fetch(query)
        results, report = self._engine.extract_with_report(html, query)
        logger.info(
            "query=%r results=%d stopped_at=%s fallback=%s",
            query,
            len(results),
            report.stopped_at,
            report.used_fallback,
        )
        return SearchOutput(query=query, results=results, report=report)
