"""Site parser capability, parsing strategies and the site descriptor."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Literal
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from loguru import logger

from recipe_finder.search.context import SearchContext
from recipe_finder.search.errors import ParseError
from recipe_finder.search.models import Candidate
from recipe_finder.search.query import url_encode
from recipe_finder.search.titles import slug_to_title, url_slug

ContentSource = Literal["html", "extractor", "static"]


@dataclass(slots=True, frozen=True)
class LinkRule:
    """Any-of include and none-of exclude substring filters on a resolved URL."""

    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()

    def matches(self, url: str) -> bool:
        if self.include and not any(s in url for s in self.include):
            return False
        return not any(s in url for s in self.exclude)


class SiteParser(ABC):
    """
    Turns raw site content into candidates.

    Subclasses only implement `extract`, yielding (title, href) pairs.
    `parse` applies the shared contract: link rule, URL resolution, dedup
    and the result cap through the search context, and exactly one fallback
    candidate when nothing real was produced.
    """

    def __init__(self, rule: LinkRule | None = None, base_url: str = ""):
        self.rule = rule or LinkRule()
        self.base_url = base_url

    @abstractmethod
    def extract(self, raw: str, query: str) -> Iterable[tuple[str, str]]:
        """Yield (title, href) pairs found in raw content."""

    def resolve(self, href: str) -> str:
        """Absolute URL for href, or "" when href cannot be joined."""
        if not self.base_url:
            return href
        try:
            return urljoin(self.base_url, href)
        except ValueError:
            logger.debug("Skipping malformed link {!r}", href)
            return ""

    def parse(
        self,
        raw: str | None,
        ctx: SearchContext,
        query: str,
        fallback: Candidate | None = None,
    ) -> list[Candidate]:
        added: list[Candidate] = []
        if raw:
            try:
                for title, href in self.extract(raw, query):
                    if ctx.full:
                        break
                    url = self.resolve((href or "").strip())
                    if not url or not self.rule.matches(url):
                        continue
                    if ctx.add(title, url):
                        added.append(ctx.candidates[-1])
            except ParseError as e:
                logger.warning("[{}] Could not parse content: {}", ctx.site_id, e)

        if not added and fallback is not None:
            logger.info("[{}] No recipes extracted, using fallback link", ctx.site_id)
            added.append(ctx.add_fallback(fallback.title, fallback.url))
        return added


class HtmlLinkParser(SiteParser):
    """Anchors picked by CSS selector out of downloaded HTML."""

    def __init__(
        self,
        selector: str = "a[href]",
        *,
        rule: LinkRule | None = None,
        base_url: str = "",
        title_selector: str = "",
        slug_titles: bool = False,
        slug_convert_titles: bool = False,
        require_query_in_title: bool = False,
    ):
        super().__init__(rule, base_url)
        self.selector = selector
        self.title_selector = title_selector
        self.slug_titles = slug_titles
        self.slug_convert_titles = slug_convert_titles
        self.require_query_in_title = require_query_in_title

    def extract(self, raw: str, query: str) -> Iterator[tuple[str, str]]:
        soup = BeautifulSoup(raw, "html.parser")
        needle = query.strip().strip("\"'").lower()

        for anchor in soup.select(self.selector):
            href = anchor.get("href")
            if not isinstance(href, str) or not href.strip():
                continue

            source = anchor
            if self.title_selector:
                source = anchor.select_one(self.title_selector) or anchor
            title = source.get_text(" ", strip=True) or anchor.get("title", "")

            if not title and self.slug_titles:
                title = slug_to_title(url_slug(href))
            elif self.slug_convert_titles:
                title = slug_to_title(title)

            if self.require_query_in_title and needle and needle not in title.lower():
                continue
            yield title, href


class ExtractorJsonParser(SiteParser):
    """JSON array of {title, url} objects printed by a browser extractor."""

    def extract(self, raw: str, query: str) -> Iterator[tuple[str, str]]:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseError(f"invalid extractor JSON: {e}") from e
        if not isinstance(data, list):
            raise ParseError("extractor output is not a JSON array")

        for item in data:
            if not isinstance(item, dict):
                continue
            title, url = item.get("title"), item.get("url")
            if isinstance(title, str) and isinstance(url, str):
                yield title, url


class StaticParser(SiteParser):
    """Sites without a usable search page; always resolves to the fallback."""

    def extract(self, raw: str, query: str) -> Iterator[tuple[str, str]]:
        return iter(())


@dataclass(slots=True, frozen=True)
class SiteDescriptor:
    """Static metadata for one recipe site."""

    site_id: str
    name: str
    url_template: str
    query_param: str
    parser: SiteParser
    source: ContentSource = "html"
    extractor_id: str = ""
    fallback_title: str = ""
    fallback_url: str | None = None
    singularize_query: bool = False

    def search_url(self, query: str) -> str:
        return self.url_template.replace("{query}", url_encode(query))

    def fallback(self, query: str) -> Candidate | None:
        """Deterministic generic link built from the raw query, or None if the site has none."""
        if self.fallback_url is None:
            return None
        title = self.fallback_title or f"Click to see {self.name} Search Page"
        return Candidate(
            title=title.replace("{query}", query.strip()),
            url=self.fallback_url.replace("{query}", url_encode(query)),
            is_fallback=True,
        )

    def parse(self, raw: str | None, ctx: SearchContext, query: str) -> list[Candidate]:
        return self.parser.parse(raw, ctx, query, self.fallback(query))
