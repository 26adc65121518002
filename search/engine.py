"""
Extraction Engine — run the strategy cascade over one provider response.

  1. Parse the raw HTML once (RawDocument)
  2. Run tiers in priority order, skipping a tier once enough results exist
  3. Validate + normalize every candidate
  4. Deduplicate by link (first seen wins, across tiers)
  5. Cap at max_results (never above MAX_RESULTS)
  6. Nothing survived -> the full synthetic fallback set

The engine holds no per-request state and never raises on bad markup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set, Tuple, Union

from .domains import LinkFilter, domain_of, is_http_url
from .fallback import synthetic_results
from .results import Candidate, SearchResult
from .strategies import ExtractionStrategy, RawDocument, default_strategies
from .text import normalize

logger = logging.getLogger(__name__)

MAX_RESULTS = 10
SNIPPET_LIMIT = 300


@dataclass
class TierReport:
    """What one tier contributed to a single extraction."""

    name: str
    ran: bool = False
    candidates: int = 0
    accepted: int = 0
    failed: bool = False


@dataclass
class ExtractionReport:
    """Diagnostics for one extraction; carries no behavioral contract."""

    query: str
    tiers: List[TierReport] = field(default_factory=list)
    stopped_at: Optional[str] = None
    used_fallback: bool = False
    result_count: int = 0


TierHook = Callable[[TierReport], None]


def clamp_max_results(value: int) -> int:
    """Keep a configured result cap within 1..MAX_RESULTS."""
    return max(1, min(int(value), MAX_RESULTS))


def clamp_snippet_limit(value: int) -> int:
    """Keep a configured snippet length within 0..SNIPPET_LIMIT."""
    return max(0, min(int(value), SNIPPET_LIMIT))


class ExtractionEngine:
    """
    Orchestrates the Strategy Set.

    Usage:
        engine = ExtractionEngine()
        results = engine.extract(html, "python dataclasses")
    """

    def __init__(
        self,
        strategies: Optional[Sequence[ExtractionStrategy]] = None,
        max_results: int = MAX_RESULTS,
        snippet_limit: int = SNIPPET_LIMIT,
        on_tier: Optional[TierHook] = None,
    ):
        self._strategies: Tuple[ExtractionStrategy, ...] = tuple(
            strategies if strategies is not None else default_strategies()
        )
        self._max_results = clamp_max_results(max_results)
        self._snippet_limit = clamp_snippet_limit(snippet_limit)
        self._on_tier = on_tier

    @property
    def strategies(self) -> Tuple[ExtractionStrategy, ...]:
        return self._strategies

    def extract(
        self, raw_html: Union[str, bytes, None], query: str
    ) -> List[SearchResult]:
        """Return at most max_results extracted results, else the fallback set."""
        results, _ = self.extract_with_report(raw_html, query)
        return results

    def extract_with_report(
        self, raw_html: Union[str, bytes, None], query: str
    ) -> Tuple[List[SearchResult], ExtractionReport]:
        document = RawDocument.parse(raw_html, query)
        report = ExtractionReport(query=document.query)

        results: List[SearchResult] = []
        seen: Set[str] = set()

        for strategy in self._strategies:
            tier = TierReport(name=strategy.name)
            report.tiers.append(tier)

            if len(results) >= self._max_results or not strategy.should_run(len(results)):
                logger.debug("tier %s skipped at %d results", strategy.name, len(results))
                continue

            tier.ran = True
            report.stopped_at = strategy.name
            candidates = self._run_strategy(strategy, document, tier)
            tier.candidates = len(candidates)

            for candidate in candidates:
                if len(results) >= self._max_results:
                    break
                result = self._to_result(candidate)
                if result is None or result.link in seen:
                    continue
                seen.add(result.link)
                results.append(result)
                tier.accepted += 1

            logger.debug(
                "tier %s: %d candidates, %d accepted (total %d)",
                strategy.name,
                tier.candidates,
                tier.accepted,
                len(results),
            )
            self._emit(tier)

        if not results:
            logger.info("No results parsed for %r, returning fallback data", document.query)
            results = synthetic_results(document.query)
            report.used_fallback = True

        report.result_count = len(results)
        return results, report

    # ------------------------------------------------------------------

    def _run_strategy(
        self, strategy: ExtractionStrategy, document: RawDocument, tier: TierReport
    ) -> List[Candidate]:
        try:
            return list(strategy.extract(document))
        except Exception:
            logger.warning("tier %s failed, skipping", strategy.name, exc_info=True)
            tier.failed = True
            return []

    def _to_result(self, candidate: Candidate) -> Optional[SearchResult]:
        """Validity gate: non-empty title and an http(s) link."""
        try:
            link = (candidate.link or "").strip()
            if not is_http_url(link):
                return None
            title = normalize(candidate.title)
            if not title:
                return None
            snippet = normalize(candidate.snippet, limit=self._snippet_limit)
            return SearchResult(
                title=title,
                link=link,
                snippet=snippet,
                display_link=domain_of(link),
            )
        except Exception:
            logger.debug("dropping malformed candidate %r", candidate, exc_info=True)
            return None

    def _emit(self, tier: TierReport) -> None:
        if self._on_tier is None:
            return
        try:
            self._on_tier(tier)
        except Exception:
            logger.warning("on_tier hook failed", exc_info=True)


def build_engine(
    extra_deny: Optional[Sequence[str]] = None,
    threshold: Optional[int] = None,
    max_results: int = MAX_RESULTS,
    snippet_limit: int = SNIPPET_LIMIT,
    on_tier: Optional[TierHook] = None,
) -> ExtractionEngine:
    """Engine with the default tiers and a shared link filter."""
    link_filter = LinkFilter(extra_deny=extra_deny)
    kwargs = {"threshold": threshold} if threshold is not None else {}
    return ExtractionEngine(
        strategies=default_strategies(link_filter=link_filter, **kwargs),
        max_results=max_results,
        snippet_limit=snippet_limit,
        on_tier=on_tier,
    )


_default_engine = ExtractionEngine()


def extract_results(raw_html: Union[str, bytes, None], query: str) -> List[SearchResult]:
    """Extract results with the default engine."""
    return _default_engine.extract(raw_html, query)
