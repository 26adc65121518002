"""
Search module — extracts ranked web results from raw provider HTML
and fetches that HTML from the provider.
"""

from .results import SearchResult, Candidate
from .text import normalize
from .domains import domain_of, resolve_href, LinkFilter, LinkKind
from .strategies import (
    RawDocument,
    ExtractionStrategy,
    ContainerStrategy,
    HeadingWindowStrategy,
    LinkWindowStrategy,
    LinkHarvestStrategy,
    default_strategies,
)
from .fallback import synthetic_results
from .engine import ExtractionEngine, ExtractionReport, TierReport, build_engine, extract_results
from .errors import SearchError, ClientInputError, UpstreamFetchError
from .config import SearchConfig
from .client import SearchClient, GoogleHTMLClient, get_search_client
from .service import SearchService, SearchOutput

__all__ = [
    "SearchResult",
    "Candidate",
    "normalize",
    "domain_of",
    "resolve_href",
    "LinkFilter",
    "LinkKind",
    "RawDocument",
    "ExtractionStrategy",
    "ContainerStrategy",
    "HeadingWindowStrategy",
    "LinkWindowStrategy",
    "LinkHarvestStrategy",
    "default_strategies",
    "synthetic_results",
    "ExtractionEngine",
    "ExtractionReport",
    "TierReport",
    "build_engine",
    "extract_results",
    "SearchError",
    "ClientInputError",
    "UpstreamFetchError",
    "SearchConfig",
    "SearchClient",
    "GoogleHTMLClient",
    "get_search_client",
    "SearchService",
    "SearchOutput",
]
