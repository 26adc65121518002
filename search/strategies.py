"""
Strategy Set — independent heuristics for locating results in provider markup.

The provider's class names and nesting are not a stable contract, so each
tier trusts a different signal:

  1. CONTAINER      — known result containers in the parse tree
  2. HEADING WINDOW — every <h3>, with a link/snippet found by markup offset
  3. LINK WINDOW    — every outbound link, with a heading in the next 800 chars
  4. LINK HARVEST   — every outbound link; title inferred from context

Strategies never validate or deduplicate across tiers; that is the engine's
job. They only return Candidates in discovery order.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple, Union

from selectolax.parser import HTMLParser, Node

from .domains import LinkFilter, domain_of, resolve_href
from .results import Candidate
from .text import normalize

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Markers
# ------------------------------------------------------------------

CONTAINER_SELECTORS: Tuple[str, ...] = (
    "div.g",
    "div.MjjYud",
    "div.tF2Cxc",
    "div[data-sokoban-container]",
    "div[data-hveid]",
)

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

SNIPPET_CLASSES: Tuple[str, ...] = (
    "VwiC3b",
    "aCOpRe",
    "IsZvec",
    "lEBKkf",
    "yXK7lf",
    "st",
)
SNIPPET_SELECTOR = ", ".join(
    [f".{cls}" for cls in SNIPPET_CLASSES] + ["[data-sncf]"]
)

# Repeats are bounded and stop at the next tag: scans over malformed
# markup (unclosed <h3, <a without href) stay linear in document size.
MAX_TAG_ATTRS = 2000
MAX_HEADING_BODY = 2000
MAX_HREF = 4096

HEADING_RE = re.compile(
    rf"<h3\b[^<>]{{0,{MAX_TAG_ATTRS}}}>"
    rf"(?P<body>(?:(?!<h3\b).){{0,{MAX_HEADING_BODY}}}?)</h3\s*>",
    re.I | re.S,
)
LINK_RE = re.compile(
    rf"<a\b[^<>]{{0,{MAX_TAG_ATTRS}}}?\bhref\s*=\s*"
    rf"""(?:"(?P<dq>[^"]{{0,{MAX_HREF}}})"|'(?P<sq>[^']{{0,{MAX_HREF}}})')""",
    re.I | re.S,
)


def _class_snippet_re(cls: str) -> re.Pattern:
    return re.compile(
        r"""<(?P<tag>div|span)\b[^<>]*\bclass\s*=\s*["'][^"']*"""
        rf"(?<![\w-]){re.escape(cls)}(?![\w-])"
        r"""[^"']*["'][^<>]*>(?P<body>.*?)</(?P=tag)\s*>""",
        re.I | re.S,
    )


SNIPPET_RES: Tuple[re.Pattern, ...] = tuple(
    [_class_snippet_re(cls) for cls in SNIPPET_CLASSES]
    + [
        re.compile(
            r"<(?P<tag>div|span)\b[^<>]*\bdata-sncf\b[^<>]*>(?P<body>.*?)</(?P=tag)\s*>",
            re.I | re.S,
        ),
        # older layout: <div style="..."><span>snippet</span>
        re.compile(
            r"""<div\b[^<>]*\bstyle\s*=\s*"[^"]*"[^<>]*>\s*<span>(?P<body>.*?)</span>""",
            re.I | re.S,
        ),
    ]
)

# Ancestor levels searched when inferring context for a bare link
MAX_ANCESTOR_DEPTH = 4

# Shortest acceptable harvested title; shorter ones are icons/labels
MIN_HARVEST_TITLE = 3

DEFAULT_THRESHOLD = 3


# ------------------------------------------------------------------
# Document
# ------------------------------------------------------------------


@dataclass(frozen=True)
class RawDocument:
    """
    Raw provider markup plus the query, parsed once and shared by all tiers.
    """

    html: str
    query: str
    tree: HTMLParser = field(repr=False, compare=False)

    @classmethod
    def parse(cls, raw: Union[str, bytes, None], query: str = "") -> RawDocument:
        """Build a document from arbitrary input. Never raises."""
        if isinstance(raw, (bytes, bytearray)):
            text = bytes(raw).decode("utf-8", errors="replace")
        elif isinstance(raw, str):
            # lone surrogates cannot be handed to the parser
            text = raw.encode("utf-8", errors="replace").decode("utf-8")
        else:
            text = ""

        try:
            tree = HTMLParser(text)
        except Exception:
            logger.warning("HTML parse failed, using empty tree", exc_info=True)
            tree = HTMLParser("")
        return cls(html=text, query=query or "", tree=tree)


# ------------------------------------------------------------------
# Abstract strategy
# ------------------------------------------------------------------


class ExtractionStrategy(ABC):
    """
    One extraction tier.

    ``threshold`` gates the tier: it runs only while the engine has
    accepted fewer than ``threshold`` results. None means always run.
    """

    name: str = "strategy"

    def __init__(
        self,
        link_filter: Optional[LinkFilter] = None,
        threshold: Optional[int] = DEFAULT_THRESHOLD,
    ):
        self.link_filter = link_filter or LinkFilter()
        self.threshold = threshold

    def should_run(self, accepted: int) -> bool:
        return self.threshold is None or accepted < self.threshold

    @abstractmethod
    def extract(self, document: RawDocument) -> List[Candidate]:
        """Return candidates in discovery order."""
        ...

    def _result_link(self, href: Optional[str]) -> Optional[str]:
        link = resolve_href(href)
        if link and self.link_filter.is_result_link(link):
            return link
        return None

    def _candidate(self, title: str, link: str, snippet: str = "") -> Candidate:
        return Candidate(title=title, link=link, snippet=snippet, tier=self.name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(threshold={self.threshold})"


# ------------------------------------------------------------------
# Tier 1 — container-structural
# ------------------------------------------------------------------


class ContainerStrategy(ExtractionStrategy):
    """
    Locate result containers by known markers.

    Selectors are tried in order; the first one that yields candidates
    wins, so nested wrappers of the same result are not walked twice.
    """

    name = "container"

    def __init__(
        self,
        link_filter: Optional[LinkFilter] = None,
        threshold: Optional[int] = None,
        selectors: Tuple[str, ...] = CONTAINER_SELECTORS,
    ):
        super().__init__(link_filter=link_filter, threshold=threshold)
        self.selectors = selectors

    def extract(self, document: RawDocument) -> List[Candidate]:
        for selector in self.selectors:
            containers = document.tree.css(selector)
            if not containers:
                continue

            candidates = []
            for container in containers:
                candidate = self._from_container(container)
                if candidate:
                    candidates.append(candidate)

            if candidates:
                logger.debug(
                    "container: %d candidates via %r", len(candidates), selector
                )
                return candidates

        return []

    def _from_container(self, container: Node) -> Optional[Candidate]:
        heading = _first_heading(container)
        if heading is None:
            return None

        link = None
        for anchor in container.css("a[href]"):
            link = self._result_link(anchor.attributes.get("href"))
            if link:
                break
        if not link:
            return None

        snippet_node = container.css_first(SNIPPET_SELECTOR)
        snippet = _inner_html(snippet_node) if snippet_node is not None else ""
        return self._candidate(_inner_html(heading), link, snippet)


# ------------------------------------------------------------------
# Tier 2 — heading-anchored window
# ------------------------------------------------------------------


def _first_snippet(html: str, start: int, end: int) -> str:
    """Body of the snippet marker that starts earliest in html[start:end]."""
    best: Optional[re.Match] = None
    for pattern in SNIPPET_RES:
        m = pattern.search(html, start, end)
        if m and (best is None or m.start() < best.start()):
            best = m
    return best.group("body") if best else ""


def _href(m: re.Match) -> str:
    return m.group("dq") if m.group("dq") is not None else m.group("sq")


class HeadingWindowStrategy(ExtractionStrategy):
    """
    Scan every <h3> and look around it in the raw markup.

    Link: the outbound link closest to the heading within
    ``before`` chars before / ``after`` chars after its start,
    preferring one that opens before the heading.
    Snippet: the first snippet marker after the heading, else anywhere
    in the window.
    """

    name = "heading_window"

    def __init__(
        self,
        link_filter: Optional[LinkFilter] = None,
        threshold: Optional[int] = DEFAULT_THRESHOLD,
        before: int = 500,
        after: int = 1000,
    ):
        super().__init__(link_filter=link_filter, threshold=threshold)
        self.before = before
        self.after = after

    def extract(self, document: RawDocument) -> List[Candidate]:
        html = document.html
        candidates: List[Candidate] = []

        for heading in HEADING_RE.finditer(html):
            pos = heading.start()
            win_start = max(0, pos - self.before)
            win_end = min(len(html), pos + self.after)

            link = self._nearest_link(html, pos, win_start, win_end)
            if not link:
                continue

            snippet = _first_snippet(html, heading.end(), win_end)
            if not snippet:
                snippet = _first_snippet(html, win_start, win_end)

            candidates.append(self._candidate(heading.group("body"), link, snippet))

        return candidates

    def _nearest_link(
        self, html: str, pos: int, win_start: int, win_end: int
    ) -> Optional[str]:
        # closest link opened before the heading (the usual <a><h3> wrap),
        # else the closest one after it
        preceding = None
        for m in LINK_RE.finditer(html, win_start, win_end):
            link = self._result_link(_href(m))
            if not link:
                continue
            if m.start() < pos:
                preceding = link
            else:
                return preceding or link
        return preceding


# ------------------------------------------------------------------
# Tier 3 — link-anchored window
# ------------------------------------------------------------------


class LinkWindowStrategy(ExtractionStrategy):
    """
    Scan every outbound link; the first <h3> within ``window`` chars
    after it is the title. Links with no heading nearby are skipped.
    """

    name = "link_window"

    def __init__(
        self,
        link_filter: Optional[LinkFilter] = None,
        threshold: Optional[int] = DEFAULT_THRESHOLD,
        window: int = 800,
    ):
        super().__init__(link_filter=link_filter, threshold=threshold)
        self.window = window

    def extract(self, document: RawDocument) -> List[Candidate]:
        html = document.html
        candidates: List[Candidate] = []
        seen: Set[str] = set()

        for m in LINK_RE.finditer(html):
            link = self._result_link(_href(m))
            if not link or link in seen:
                continue

            end = min(len(html), m.start() + self.window)
            heading = HEADING_RE.search(html, m.start(), end)
            if not heading:
                continue

            seen.add(link)
            snippet = _first_snippet(html, m.start(), end)
            candidates.append(self._candidate(heading.group("body"), link, snippet))

        return candidates


# ------------------------------------------------------------------
# Tier 4 — pure link harvest
# ------------------------------------------------------------------


class LinkHarvestStrategy(ExtractionStrategy):
    """
    Last resort: every outbound link becomes a candidate.

    Title preference:
      1. heading inside the link
      2. the link's own text
      3. nearest enclosing heading
      4. the link's domain
    """

    name = "link_harvest"

    def __init__(
        self,
        link_filter: Optional[LinkFilter] = None,
        threshold: Optional[int] = DEFAULT_THRESHOLD,
        min_title_length: int = MIN_HARVEST_TITLE,
    ):
        super().__init__(link_filter=link_filter, threshold=threshold)
        self.min_title_length = min_title_length

    def extract(self, document: RawDocument) -> List[Candidate]:
        candidates: List[Candidate] = []
        seen: Set[str] = set()

        for anchor in document.tree.css("a[href]"):
            link = self._result_link(anchor.attributes.get("href"))
            if not link or link in seen:
                continue

            title = self._infer_title(anchor, link)
            if len(title) <= self.min_title_length:
                continue

            seen.add(link)
            candidates.append(self._candidate(title, link, self._infer_snippet(anchor)))

        return candidates

    def _infer_title(self, anchor: Node, link: str) -> str:
        inner = _first_heading(anchor)
        if inner is not None:
            title = normalize(_inner_html(inner))
            if title:
                return title

        title = normalize(_inner_html(anchor))
        if title:
            return title

        for ancestor in _ancestors(anchor):
            heading = _first_heading(ancestor)
            if heading is not None:
                title = normalize(_inner_html(heading))
                if title:
                    return title

        return domain_of(link)

    @staticmethod
    def _infer_snippet(anchor: Node) -> str:
        for ancestor in _ancestors(anchor):
            node = ancestor.css_first(SNIPPET_SELECTOR)
            if node is not None:
                return _inner_html(node)
        return ""


def _inner_html(node: Node) -> str:
    """Serialized children of node, without node's own start and end tags."""
    return "".join(child.html or "" for child in node.iter(include_text=True))


def _first_heading(node: Node) -> Optional[Node]:
    """First h1-h6 at or below node, in document order."""
    for descendant in node.traverse():
        if descendant.tag in HEADING_TAGS:
            return descendant
    return None


def _ancestors(node: Node):
    """Yield up to MAX_ANCESTOR_DEPTH parents, stopping below <body>."""
    current = node.parent
    depth = 0
    while current is not None and depth < MAX_ANCESTOR_DEPTH:
        if current.tag in ("body", "html"):
            break
        yield current
        current = current.parent
        depth += 1


def default_strategies(
    link_filter: Optional[LinkFilter] = None,
    threshold: int = DEFAULT_THRESHOLD,
) -> List[ExtractionStrategy]:
    """The four tiers in priority order, sharing one link filter."""
    link_filter = link_filter or LinkFilter()
    return [
        ContainerStrategy(link_filter=link_filter),
        HeadingWindowStrategy(link_filter=link_filter, threshold=threshold),
        LinkWindowStrategy(link_filter=link_filter, threshold=threshold),
        LinkHarvestStrategy(link_filter=link_filter, threshold=threshold),
    ]
