"""
Tests for the extraction engine and fallback generator.
"""

import time

import pytest

from search.engine import (
    MAX_RESULTS,
    SNIPPET_LIMIT,
    ExtractionEngine,
    build_engine,
    extract_results,
)
from search.fallback import synthetic_results, FALLBACK_SIZE
from search.results import Candidate, SearchResult
from search.strategies import ContainerStrategy, ExtractionStrategy


def _container(title, link, snippet=""):
    snip = f'<div class="VwiC3b">{snippet}</div>' if snippet else ""
    return f'<div class="g"><a href="{link}"><h3>{title}</h3></a>{snip}</div>'


def _page(*blocks):
    return "<html><body>" + "".join(blocks) + "</body></html>"


class FixedStrategy(ExtractionStrategy):
    """Returns a canned candidate list."""

    name = "fixed"

    def __init__(self, candidates, threshold=None):
        super().__init__(threshold=threshold)
        self._candidates = candidates

    def extract(self, document):
        return list(self._candidates)


class BrokenStrategy(ExtractionStrategy):
    name = "broken"

    def __init__(self):
        super().__init__(threshold=None)

    def extract(self, document):
        raise RuntimeError("markup changed")


# ===================================================================
# Scenarios
# ===================================================================


class TestScenarios:
    """End-to-end extraction scenarios."""

    def test_single_well_formed_container(self):
        html = _page(_container("Example Domain", "https://example.com/", "An example."))
        assert extract_results(html, "example") == [
            SearchResult(
                title="Example Domain",
                link="https://example.com/",
                snippet="An example.",
                display_link="example.com",
            )
        ]

    def test_empty_html_returns_fallback(self):
        assert extract_results("", "foo") == synthetic_results("foo")

    def test_twelve_candidates_capped_at_ten(self):
        html = _page(*[_container(f"Result {i}", f"https://site{i}.example.com/") for i in range(12)])
        results = extract_results(html, "q")
        assert len(results) == 10
        assert [r.title for r in results] == [f"Result {i}" for i in range(10)]

    def test_duplicate_links_first_wins(self):
        html = _page(
            _container("First", "https://example.com/same"),
            _container("Second", "https://example.com/same"),
            _container("Third", "https://example.com/same"),
        )
        results = extract_results(html, "q")
        assert len(results) == 1
        assert results[0].title == "First"


# ===================================================================
# Properties
# ===================================================================


def _messy_page():
    blocks = []
    for i in range(30):
        blocks.append(
            f'<a href="/url?q=https://site{i % 15}.example.com/&amp;sa=U">'
            f"<h3>Item &amp; {i}</h3></a>"
            f'<div class="VwiC3b">{"long snippet " * 50}</div>'
        )
    blocks.append('<a href="https://www.google.com/search?q=next">Next</a>')
    return _page(*blocks)


class TestProperties:
    """Invariants that hold for any input."""

    def test_deterministic(self):
        html = _messy_page()
        assert extract_results(html, "q") == extract_results(html, "q")

    def test_unique_links_and_bounds(self):
        results = extract_results(_messy_page(), "q")
        links = [r.link for r in results]
        assert len(links) == len(set(links))
        assert 1 <= len(results) <= 10
        assert all(len(r.snippet) <= 300 for r in results)
        assert all(r.link.startswith(("http://", "https://")) for r in results)
        assert all(r.title for r in results)

    def test_display_link_derived(self):
        results = extract_results(_messy_page(), "q")
        assert results[0].display_link == "site0.example.com"

    @pytest.mark.parametrize(
        "raw",
        [None, "", "<<<>>>&&&", "\x00\x01<h3>", "<p>\ud800</p>", b"\xff\xfe<a href='x'>", "<a href=\"http://[::1\"><h3>Bad</h3></a>"],
    )
    def test_never_empty_never_raises(self, raw):
        results = extract_results(raw, "foo")
        assert len(results) >= 1

    def test_bytes_input(self):
        html = _page(_container("Example Domain", "https://example.com/"))
        assert extract_results(html.encode("utf-8"), "q") == extract_results(html, "q")


# ===================================================================
# Tier gating
# ===================================================================


class TestGating:
    """Tests for the sufficiency thresholds."""

    def test_later_tiers_skipped_when_sufficient(self):
        html = _page(
            _container("A", "https://a.example.com/"),
            _container("B", "https://b.example.com/"),
            _container("C", "https://c.example.com/"),
            '<p><a href="https://extra.example.com/">Extra link text</a></p>',
        )
        results, report = ExtractionEngine().extract_with_report(html, "q")
        assert [r.title for r in results] == ["A", "B", "C"]
        assert [t.ran for t in report.tiers] == [True, False, False, False]
        assert report.stopped_at == "container"
        assert report.used_fallback is False

    def test_permissive_tiers_fill_in(self):
        html = _page(
            _container("A", "https://a.example.com/"),
            '<p><a href="https://extra.example.com/">Extra link text</a></p>',
        )
        results, report = ExtractionEngine().extract_with_report(html, "q")
        assert [r.title for r in results] == ["A", "Extra link text"]
        assert report.stopped_at == "link_harvest"
        assert report.tiers[-1].accepted == 1

    def test_custom_threshold(self):
        html = _page(
            _container("A", "https://a.example.com/"),
            '<p><a href="https://extra.example.com/">Extra link text</a></p>',
        )
        engine = build_engine(threshold=1)
        assert [r.title for r in engine.extract(html, "q")] == ["A"]


# ===================================================================
# Validation and failure handling
# ===================================================================


class TestValidation:
    """Candidate validity gate and degradation."""

    def test_invalid_candidates_dropped(self):
        engine = ExtractionEngine(
            strategies=[
                FixedStrategy(
                    [
                        Candidate(title="", link="https://a.example.com/"),
                        Candidate(title="<b> </b>", link="https://b.example.com/"),
                        Candidate(title="FTP", link="ftp://c.example.com/"),
                        Candidate(title="Relative", link="/relative"),
                    ]
                )
            ]
        )
        results, report = engine.extract_with_report("<p></p>", "bar")
        assert report.used_fallback is True
        assert results == synthetic_results("bar")

    def test_title_and_snippet_normalized(self):
        engine = ExtractionEngine(
            strategies=[
                FixedStrategy(
                    [
                        Candidate(
                            title="<em>Fish</em> &amp; Chips",
                            link="https://www.example.com/f",
                            snippet="<span>" + "a" * 500 + "</span>",
                        )
                    ]
                )
            ]
        )
        result = engine.extract("", "q")[0]
        assert result.title == "Fish & Chips"
        assert result.snippet == "a" * 300
        assert result.display_link == "example.com"

    def test_broken_strategy_is_skipped(self):
        html = _page(_container("Example Domain", "https://example.com/"))
        engine = ExtractionEngine(strategies=[BrokenStrategy(), ContainerStrategy()])
        results, report = engine.extract_with_report(html, "q")
        assert [r.title for r in results] == ["Example Domain"]
        assert report.tiers[0].failed is True

    def test_dedup_across_tiers(self):
        engine = ExtractionEngine(
            strategies=[
                FixedStrategy([Candidate(title="Tier one", link="https://example.com/")]),
                FixedStrategy([Candidate(title="Tier two", link="https://example.com/")]),
            ]
        )
        assert [r.title for r in engine.extract("", "q")] == ["Tier one"]

    def test_custom_max_results(self):
        candidates = [Candidate(title=f"T{i}", link=f"https://e{i}.example.com/") for i in range(5)]
        engine = ExtractionEngine(strategies=[FixedStrategy(candidates)], max_results=2)
        assert len(engine.extract("", "q")) == 2

    def test_max_results_never_above_ten(self):
        candidates = [Candidate(title=f"T{i}", link=f"https://e{i}.example.com/") for i in range(15)]
        engine = ExtractionEngine(strategies=[FixedStrategy(candidates)], max_results=50)
        assert len(engine.extract("", "q")) == MAX_RESULTS

    def test_small_max_results_keeps_full_fallback(self):
        engine = ExtractionEngine(strategies=[FixedStrategy([])], max_results=3)
        results = engine.extract("", "foo")
        assert results == synthetic_results("foo")
        assert len(results) == FALLBACK_SIZE

    def test_snippet_limit_never_above_300(self):
        candidates = [Candidate(title="T", link="https://e.example.com/", snippet="x" * 1000)]
        engine = ExtractionEngine(strategies=[FixedStrategy(candidates)], snippet_limit=5000)
        assert len(engine.extract("", "q")[0].snippet) == SNIPPET_LIMIT

    def test_build_engine_clamps_limits(self):
        engine = build_engine(max_results=3)
        assert len(engine.extract("", "foo")) == FALLBACK_SIZE


# ===================================================================
# Malformed input at scale
# ===================================================================


class TestMalformedInputAtScale:
    """Unclosed tags repeated over a large page must not stall extraction."""

    BUDGET_SECONDS = 5.0

    @pytest.mark.parametrize(
        "unit",
        ["<h3>", "<h3 ", "<a ", '<a href="', "<a href='https://e.example.com/' "],
    )
    def test_linear_time(self, unit):
        raw = unit * (200_000 // len(unit))
        started = time.perf_counter()
        results = extract_results(raw, "q")
        elapsed = time.perf_counter() - started
        assert results
        assert elapsed < self.BUDGET_SECONDS


# ===================================================================
# Observability hook
# ===================================================================


class TestTierHook:

    def test_hook_receives_reports(self):
        seen = []
        engine = build_engine(on_tier=seen.append)
        engine.extract(_page(_container("A", "https://a.example.com/")), "q")
        assert [t.name for t in seen] == ["container", "heading_window", "link_window", "link_harvest"]
        assert seen[0].candidates == 1
        assert seen[0].accepted == 1

    def test_failing_hook_does_not_break_extraction(self):
        def hook(report):
            raise ValueError("sink down")

        engine = build_engine(on_tier=hook)
        results = engine.extract(_page(_container("A", "https://a.example.com/")), "q")
        assert [r.title for r in results] == ["A"]


# ===================================================================
# Fallback Generator
# ===================================================================


class TestFallback:
    """Tests for synthetic_results()."""

    def test_exactly_five(self):
        assert len(synthetic_results("foo")) == FALLBACK_SIZE == 5

    def test_deterministic(self):
        assert synthetic_results("foo") == synthetic_results("foo")

    def test_parameterized_by_query(self):
        results = synthetic_results("rust async")
        assert all("rust async" in r.title for r in results)
        assert all("rust+async" in r.link for r in results)
        assert synthetic_results("a") != synthetic_results("b")

    def test_same_shape_as_real_results(self):
        for r in synthetic_results("foo"):
            assert isinstance(r, SearchResult)
            assert r.title and r.snippet
            assert r.link.startswith("https://")
            assert r.display_link and "example." in r.display_link
            assert set(r.to_dict()) == {"title", "link", "snippet", "displayLink"}

    def test_unique_links(self):
        links = [r.link for r in synthetic_results("foo")]
        assert len(set(links)) == 5

    def test_blank_query(self):
        results = synthetic_results("   ")
        assert len(results) == 5
        assert all(r.title for r in results)
