from __future__ import annotations

import asyncio
import json

import pytest

import recipe_finder.extractors.invoker as invoker_module
from recipe_finder.config.schema import Config, ExtractorConfig
from recipe_finder.extractors.invoker import ExtractorInvoker
from recipe_finder.search.errors import FetchError, InvokeError, SearchInProgressError
from recipe_finder.search.orchestrator import (
    EMPTY_QUERY_MESSAGE,
    ENCODE_FAILED_MESSAGE,
    FALLBACK_MESSAGE,
    FETCH_FAILED_MESSAGE,
    INVALID_SITE_MESSAGE,
    SearchOrchestrator,
)
from recipe_finder.sites.base import HtmlLinkParser, LinkRule, SiteDescriptor
from recipe_finder.sites.registry import SiteRegistry

pytestmark = pytest.mark.asyncio


class FakeFetcher:
    def __init__(
        self,
        body: str = "",
        *,
        error: Exception | None = None,
        delay_sec: float = 0.0,
        orchestrator: SearchOrchestrator | None = None,
    ):
        self.body = body
        self.error = error
        self.delay_sec = delay_sec
        self.orchestrator = orchestrator
        self.calls: list[tuple[str, str]] = []
        self.states: list[str] = []

    async def fetch(self, url: str, *, label: str = "") -> str:
        self.calls.append((url, label))
        if self.orchestrator is not None:
            self.states.append(self.orchestrator.state)
        if self.delay_sec:
            await asyncio.sleep(self.delay_sec)
        if self.error:
            raise self.error
        return self.body


class FakeInvoker:
    def __init__(self, output: str = "[]", *, error: Exception | None = None):
        self.output = output
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def invoke(self, template_id: str, query: str) -> str:
        self.calls.append((template_id, query))
        if self.error:
            raise self.error
        return self.output


def _items(*pairs: tuple[str, str]) -> str:
    return json.dumps([{"title": t, "url": u} for t, u in pairs])


def _orchestrator(
    fetcher: FakeFetcher | None = None,
    invoker: FakeInvoker | None = None,
    **kwargs,
) -> SearchOrchestrator:
    return SearchOrchestrator(
        fetcher=fetcher or FakeFetcher(),
        invoker=invoker or FakeInvoker(),
        **kwargs,
    )


async def test_unquoted_search_passes_all_candidates_through() -> None:
    invoker = FakeInvoker(
        _items(
            ("White Chicken Chili", "https://www.allrecipes.com/recipe/1/white-chicken-chili/"),
            ("Beef Stew", "https://www.allrecipes.com/recipe/2/beef-stew/"),
            ("White Chicken Chili", "https://www.allrecipes.com/recipe/1/white-chicken-chili"),
        )
    )
    orchestrator = _orchestrator(invoker=invoker)

    outcome = await orchestrator.search("chili", "allrecipes")

    assert outcome.kind == "success"
    assert outcome.query.quote_state == "none"
    assert [(r.title, r.match) for r in outcome.results] == [
        ("White Chicken Chili", "none"),
        ("Beef Stew", "none"),
    ]
    assert outcome.search_url == "https://www.allrecipes.com/search/results/?wt=chili"
    assert invoker.calls == [("allrecipes", "chili")]
    assert orchestrator.state == "done"
    assert orchestrator.last_outcome is outcome


async def test_quoted_search_ranks_and_filters() -> None:
    invoker = FakeInvoker(
        _items(
            ("Roasted Chicken Thighs", "https://www.allrecipes.com/recipe/1/"),
            ("Beef Stew", "https://www.allrecipes.com/recipe/2/"),
            ("Classic Roast Chicken", "https://www.allrecipes.com/recipe/3/"),
        )
    )
    orchestrator = _orchestrator(invoker=invoker)

    outcome = await orchestrator.search('"roast chicken"', "allrecipes")

    assert outcome.kind == "success"
    assert outcome.query.decisive_tokens == ("roast", "chicken")
    assert [(r.title, r.match, r.matched_tokens, r.total_tokens) for r in outcome.results] == [
        ("Roasted Chicken Thighs", "partial", 1, 2),
        ("Classic Roast Chicken", "perfect", 2, 2),
    ]
    assert invoker.calls == [("allrecipes", '"roast chicken"')]


async def test_quoted_search_with_no_matches_falls_back() -> None:
    invoker = FakeInvoker(_items(("Beef Stew", "https://www.bbcgoodfood.com/recipes/beef-stew")))
    orchestrator = _orchestrator(invoker=invoker)

    outcome = await orchestrator.search('"roast chicken"', "bbcgoodfood")

    assert outcome.kind == "fallback"
    assert outcome.results == []
    assert outcome.fallback.url == "https://www.bbcgoodfood.com/search?q=%22roast%20chicken%22"
    assert outcome.message == FALLBACK_MESSAGE


async def test_extractor_failure_falls_back_to_site_search() -> None:
    invoker = FakeInvoker(error=InvokeError("extractor bbcgoodfood timed out after 60s"))
    orchestrator = _orchestrator(invoker=invoker)

    outcome = await orchestrator.search("roast chicken", "bbcgoodfood")

    assert outcome.kind == "fallback"
    assert outcome.ok is True
    assert outcome.fallback.is_fallback is True
    assert outcome.fallback.url == "https://www.bbcgoodfood.com/search?q=roast%20chicken"
    assert outcome.fallback.title == "Click To See Bbc Good Food Recipes"


async def test_extractor_timeout_end_to_end(monkeypatch: pytest.MonkeyPatch) -> None:
    class SlowProcess:
        returncode = None
        killed = False

        async def communicate(self):
            await asyncio.sleep(2.0)
            return b"[]", b""

        def kill(self):
            self.killed = True

        async def wait(self):
            return -9

    process = SlowProcess()

    async def fake_exec(*args, **kwargs):
        return process

    monkeypatch.setattr(invoker_module.asyncio, "create_subprocess_exec", fake_exec)
    orchestrator = SearchOrchestrator(
        fetcher=FakeFetcher(),
        invoker=ExtractorInvoker(ExtractorConfig(timeout_s=1)),
    )

    outcome = await orchestrator.search("chili", "eatingwell")

    assert process.killed is True
    assert outcome.kind == "fallback"
    assert outcome.fallback.url == "https://www.eatingwell.com/search/?q=chili"


async def test_html_site_is_fetched_and_parsed() -> None:
    html = """
    <a href="/recipes/food/views/white-chili-1">White Chili</a>
    <a href="/recipes/food/views/red-chili-2">Red Chili</a>
    """
    fetcher = FakeFetcher(html)
    orchestrator = _orchestrator(fetcher=fetcher)
    fetcher.orchestrator = orchestrator

    outcome = await orchestrator.search("chili", "epicurious")

    assert [r.title for r in outcome.results] == ["White Chili", "Red Chili"]
    assert fetcher.calls == [("https://www.epicurious.com/search/chili", "Epicurious")]
    assert fetcher.states == ["fetching"]


async def test_fetch_failure_falls_back() -> None:
    fetcher = FakeFetcher(error=FetchError("response exceeded the download buffer"))
    orchestrator = _orchestrator(fetcher=fetcher)

    outcome = await orchestrator.search("beef stew", "tasteofhome")

    assert outcome.kind == "fallback"
    assert outcome.fallback.url == "https://www.tasteofhome.com/?s=beef%20stew"


async def test_fetch_failure_without_fallback_is_a_failure() -> None:
    registry = SiteRegistry(
        [
            SiteDescriptor(
                site_id="bare",
                name="Bare",
                url_template="https://bare.example/?q={query}",
                query_param="?q=",
                parser=HtmlLinkParser(rule=LinkRule(include=("/recipe/",))),
            )
        ]
    )
    orchestrator = _orchestrator(
        fetcher=FakeFetcher(error=FetchError("boom")),
        registry=registry,
    )

    outcome = await orchestrator.search("chili", "bare")

    assert outcome.kind == "failure"
    assert outcome.ok is False
    assert outcome.message == FETCH_FAILED_MESSAGE
    assert outcome.fallback is None


async def test_saveur_singularizes_site_query_but_not_fallback() -> None:
    fetcher = FakeFetcher("<html></html>")
    orchestrator = _orchestrator(fetcher=fetcher)

    outcome = await orchestrator.search("Cherries", "saveur")

    assert fetcher.calls[0][0] == "https://www.saveur.com/search/Cherry/"
    assert outcome.kind == "fallback"
    assert outcome.fallback.url == "https://www.saveur.com/search/Cherries"


async def test_static_site_skips_retrieval() -> None:
    fetcher = FakeFetcher()
    invoker = FakeInvoker()
    orchestrator = _orchestrator(fetcher=fetcher, invoker=invoker)

    outcome = await orchestrator.search("chili", "chowhound")

    assert outcome.kind == "fallback"
    assert fetcher.calls == [] and invoker.calls == []
    assert outcome.fallback.url == "https://www.chowhound.com/category/recipes/"


@pytest.mark.parametrize("query", ["", "   "])
async def test_empty_query_fails_without_retrieval(query: str) -> None:
    invoker = FakeInvoker()
    orchestrator = _orchestrator(invoker=invoker)

    outcome = await orchestrator.search(query, "allrecipes")

    assert outcome.kind == "failure"
    assert outcome.message == EMPTY_QUERY_MESSAGE
    assert invoker.calls == []


async def test_unknown_site_fails() -> None:
    outcome = await _orchestrator().search("chili", "pinterest")

    assert outcome.kind == "failure"
    assert outcome.message == INVALID_SITE_MESSAGE


async def test_unencodable_query_fails() -> None:
    outcome = await _orchestrator().search("chili \udcff", "epicurious")

    assert outcome.kind == "failure"
    assert outcome.message == ENCODE_FAILED_MESSAGE


async def test_default_site_is_used_when_none_given() -> None:
    invoker = FakeInvoker()
    config = Config()
    config.search.default_site = "food52"
    orchestrator = _orchestrator(invoker=invoker, config=config)

    await orchestrator.search("chili")

    assert invoker.calls == [("food52", "chili")]


async def test_results_are_capped_per_search() -> None:
    items = [(f"Chili {chr(65 + i % 26)}{i}", f"https://www.allrecipes.com/recipe/{i}/") for i in range(70)]
    orchestrator = _orchestrator(invoker=FakeInvoker(_items(*items)))

    outcome = await orchestrator.search("chili", "allrecipes")

    assert len(outcome.results) == 50


async def test_second_submit_is_rejected_while_busy() -> None:
    fetcher = FakeFetcher('<a href="/recipes/food/views/chili-1">Chili</a>', delay_sec=0.05)
    orchestrator = _orchestrator(fetcher=fetcher)

    task = orchestrator.submit("chili", "epicurious")
    await asyncio.sleep(0)
    assert orchestrator.busy is True

    with pytest.raises(SearchInProgressError):
        orchestrator.submit("beef stew", "epicurious")

    outcome = await task
    assert outcome.kind == "success"
    assert fetcher.calls == [("https://www.epicurious.com/search/chili", "Epicurious")]
    assert orchestrator.busy is False
    assert orchestrator.state == "done"


async def test_searches_do_not_share_dedup_state() -> None:
    html = '<a href="/recipes/food/views/chili-1">Chili</a>'
    orchestrator = _orchestrator(fetcher=FakeFetcher(html))

    first = await orchestrator.search("chili", "epicurious")
    second = await orchestrator.search("chili", "epicurious")

    assert [r.url for r in first.results] == [r.url for r in second.results]
    assert len(second.results) == 1


async def test_malformed_extractor_link_does_not_abort_search() -> None:
    invoker = FakeInvoker(
        _items(
            ("Good Chili", "https://www.allrecipes.com/recipe/1/chili/"),
            ("Broken", "http://[bad/recipe/2/"),
        )
    )
    orchestrator = _orchestrator(invoker=invoker)

    outcome = await orchestrator.search("chili", "allrecipes")

    assert outcome.kind == "success"
    assert [r.title for r in outcome.results] == ["Good Chili"]
    assert orchestrator.last_outcome is outcome
