"""
Fallback Generator — synthetic results for a query that produced none.

Pure function of the query: no clock, no randomness, no I/O. Entries live
on reserved example domains so they can never collide with a real hit,
but carry the same fields as genuine results.
"""

from __future__ import annotations

from typing import List, Tuple
from urllib.parse import quote_plus

from .domains import domain_of
from .results import SearchResult

FALLBACK_SIZE = 5

# (link template, title template, snippet template)
_TEMPLATES: Tuple[Tuple[str, str, str], ...] = (
    (
        "https://www.example.com/search?q={q}",
        "{query} - Overview",
        "An overview of {query}: what it is, how it works and where to start.",
    ),
    (
        "https://docs.example.com/guide?topic={q}",
        "{query} - Documentation and Guides",
        "Reference documentation and step-by-step guides covering {query}.",
    ),
    (
        "https://www.example.org/learn/{q}",
        "Learn {query} - Tutorials",
        "Tutorials and worked examples that introduce {query} from the basics.",
    ),
    (
        "https://forum.example.net/tags/{q}",
        "{query} - Community Discussions",
        "Questions, answers and discussions from the community about {query}.",
    ),
    (
        "https://www.example.net/news?q={q}",
        "Latest on {query}",
        "Recent articles and updates related to {query}.",
    ),
)


def synthetic_results(query: str) -> List[SearchResult]:
    """Return exactly FALLBACK_SIZE placeholder results for ``query``."""
    label = " ".join((query or "").split()) or "search"
    encoded = quote_plus(label)

    results: List[SearchResult] = []
    for link_t, title_t, snippet_t in _TEMPLATES[:FALLBACK_SIZE]:
        link = link_t.format(q=encoded)
        results.append(
            SearchResult(
                title=title_t.format(query=label),
                link=link,
                snippet=snippet_t.format(query=label)[:300],
                display_link=domain_of(link),
            )
        )
    return results
