"""One-at-a-time search pipeline: retrieve, parse, rank."""

from __future__ import annotations

import asyncio

from loguru import logger

from recipe_finder.config.schema import Config
from recipe_finder.extractors.invoker import ExtractorInvoker
from recipe_finder.search.context import SearchContext
from recipe_finder.search.errors import (
    FetchError,
    InputError,
    InvokeError,
    SearchInProgressError,
    SiteNotFoundError,
)
from recipe_finder.search.fetcher import Fetcher
from recipe_finder.search.models import QueryInterpretation, SearchOutcome, SearchState
from recipe_finder.search.query import QueryInterpreter
from recipe_finder.search.ranking import rank_candidates
from recipe_finder.sites.base import SiteDescriptor
from recipe_finder.sites.registry import SiteRegistry, default_registry

EMPTY_QUERY_MESSAGE = "Please enter a recipe search term (like roast chicken, or chili)"
INVALID_SITE_MESSAGE = "Please select a valid recipe site."
ENCODE_FAILED_MESSAGE = "Failed to encode search term."
FETCH_FAILED_MESSAGE = "Failed to fetch recipes."
NO_RESULTS_MESSAGE = "No matching recipes found."
FALLBACK_MESSAGE = "Matching recipes not found. Click to open the main food website."


class SearchOrchestrator:
    """
    Runs one search at a time as a background asyncio task.

    Callers either await `search()` or keep the task from `submit()` and poll
    `state` / `busy`. A submit while a search is running raises
    SearchInProgressError and leaves the running search untouched. Every
    search gets a fresh SearchContext, so no state carries over.
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        registry: SiteRegistry | None = None,
        fetcher: Fetcher | None = None,
        invoker: ExtractorInvoker | None = None,
        interpreter: QueryInterpreter | None = None,
    ):
        self.config = config or Config()
        self.registry = registry or default_registry()
        self.fetcher = fetcher or Fetcher(self.config.fetch)
        self.invoker = invoker or ExtractorInvoker(self.config.extractor)
        self.interpreter = interpreter or QueryInterpreter.from_config(self.config.vocabulary)
        self._state: SearchState = "idle"
        self._task: asyncio.Task[SearchOutcome] | None = None
        self.last_outcome: SearchOutcome | None = None

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, query: str, site_id: str | None = None) -> asyncio.Task[SearchOutcome]:
        """Start a search in the background; must be called from a running event loop."""
        if self.busy:
            raise SearchInProgressError("a search is already in progress")
        self._state = "idle"
        self.last_outcome = None
        self._task = asyncio.create_task(
            self._run(query, site_id or self.config.search.default_site)
        )
        return self._task

    async def search(self, query: str, site_id: str | None = None) -> SearchOutcome:
        return await self.submit(query, site_id)

    async def _run(self, query: str, site_id: str) -> SearchOutcome:
        try:
            outcome = await self._pipeline(query, site_id)
        finally:
            self._set_state("done")

        self.last_outcome = outcome
        if outcome.kind == "failure":
            logger.error("Search failed: {}", outcome.message)
        elif outcome.kind == "fallback":
            logger.info("Search finished with fallback link {}", outcome.fallback.url)
        else:
            logger.info("Search finished with {} results", len(outcome.results))
        return outcome

    async def _pipeline(self, query: str, site_id: str) -> SearchOutcome:
        raw = (query or "").strip()
        interpretation = self.interpreter.interpret(raw)
        if not raw:
            return SearchOutcome.failure(EMPTY_QUERY_MESSAGE, query=interpretation)

        try:
            site = self.registry.resolve(site_id)
        except SiteNotFoundError as e:
            logger.warning("{}", e)
            return SearchOutcome.failure(INVALID_SITE_MESSAGE, query=interpretation)

        site_query = self.interpreter.singularize(raw) if site.singularize_query else raw
        try:
            search_url = site.search_url(site_query)
        except InputError:
            return SearchOutcome.failure(ENCODE_FAILED_MESSAGE, query=interpretation)

        logger.info("Searching {} for {!r}: {}", site.name, raw, interpretation.status_message)
        ctx = SearchContext(
            query=raw,
            site_id=site.site_id,
            max_results=self.config.search.max_results,
        )

        content: str | None = None
        retrieval_failed = False
        try:
            content = await self._retrieve(site, search_url, raw)
        except (FetchError, InvokeError) as e:
            logger.warning("[{}] {}", site.site_id, e)
            retrieval_failed = True

        self._set_state("ranking")
        candidates = site.parse(content, ctx, raw)
        results = rank_candidates(candidates, interpretation)
        if results:
            return SearchOutcome.success(results, query=interpretation, search_url=search_url)

        return self._fallback_or_failure(
            site,
            ctx,
            interpretation,
            search_url,
            FETCH_FAILED_MESSAGE if retrieval_failed else NO_RESULTS_MESSAGE,
        )

    async def _retrieve(self, site: SiteDescriptor, search_url: str, raw: str) -> str | None:
        if site.source == "html":
            self._set_state("fetching")
            return await self.fetcher.fetch(search_url, label=site.name)
        if site.source == "extractor":
            self._set_state("extracting")
            return await self.invoker.invoke(site.extractor_id or site.site_id, raw)
        return None

    def _fallback_or_failure(
        self,
        site: SiteDescriptor,
        ctx: SearchContext,
        interpretation: QueryInterpretation,
        search_url: str,
        failure_message: str,
    ) -> SearchOutcome:
        fallback = next((c for c in ctx.candidates if c.is_fallback), None)
        if fallback is None:
            generic = site.fallback(ctx.query)
            if generic is not None:
                # Ranking removed every real candidate; the parser added none.
                fallback = ctx.add_fallback(generic.title, generic.url)

        if fallback is None:
            return SearchOutcome.failure(failure_message, query=interpretation, search_url=search_url)
        return SearchOutcome.with_fallback(
            fallback,
            message=FALLBACK_MESSAGE,
            query=interpretation,
            search_url=search_url,
        )

    def _set_state(self, state: SearchState) -> None:
        if state != self._state:
            logger.info("Search state {} -> {}", self._state, state)
            self._state = state
