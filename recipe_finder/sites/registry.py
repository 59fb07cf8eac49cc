"""Site registry and the built-in site table."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from recipe_finder.search.errors import SiteNotFoundError
from recipe_finder.sites.base import (
    ExtractorJsonParser,
    HtmlLinkParser,
    LinkRule,
    SiteDescriptor,
    StaticParser,
)


class SiteRegistry:
    """Read-only map from site id to descriptor once built."""

    def __init__(self, sites: Iterable[SiteDescriptor] = ()):
        self._sites: dict[str, SiteDescriptor] = {}
        for site in sites:
            self.register(site)

    def register(self, site: SiteDescriptor) -> None:
        if site.site_id in self._sites:
            raise ValueError(f"duplicate site id: {site.site_id}")
        self._sites[site.site_id] = site

    def resolve(self, site_id: str) -> SiteDescriptor:
        key = (site_id or "").strip().lower()
        site = self._sites.get(key)
        if site is None:
            raise SiteNotFoundError(site_id)
        return site

    def ids(self) -> list[str]:
        return list(self._sites)

    def __contains__(self, site_id: object) -> bool:
        return isinstance(site_id, str) and site_id.strip().lower() in self._sites

    def __iter__(self) -> Iterator[SiteDescriptor]:
        return iter(self._sites.values())

    def __len__(self) -> int:
        return len(self._sites)


def _extractor_site(
    site_id: str,
    name: str,
    url_template: str,
    query_param: str,
    base_url: str,
    *,
    fallback_url: str,
    fallback_title: str = "",
    rule: LinkRule | None = None,
) -> SiteDescriptor:
    return SiteDescriptor(
        site_id=site_id,
        name=name,
        url_template=url_template,
        query_param=query_param,
        parser=ExtractorJsonParser(rule, base_url),
        source="extractor",
        extractor_id=site_id,
        fallback_title=fallback_title,
        fallback_url=fallback_url,
    )


def build_default_sites() -> list[SiteDescriptor]:
    """The 20 built-in recipe sites, in display order."""
    return [
        _extractor_site(
            "allrecipes",
            "AllRecipes",
            "https://www.allrecipes.com/search/results/?wt={query}",
            "?wt=",
            "https://www.allrecipes.com",
            fallback_url="https://www.allrecipes.com/recipes/",
            rule=LinkRule(include=("/recipe/",), exclude=("/video/",)),
        ),
        _extractor_site(
            "bbcgoodfood",
            "BBC Good Food",
            "https://www.bbcgoodfood.com/search?q={query}",
            "?q=",
            "https://www.bbcgoodfood.com",
            fallback_url="https://www.bbcgoodfood.com/search?q={query}",
            fallback_title="Click to see BBC Good Food Recipes",
            rule=LinkRule(include=("/recipes/",)),
        ),
        _extractor_site(
            "bonappetit",
            "Bon Appetit",
            "https://www.bonappetit.com/search/{query}",
            "{query}",
            "https://www.bonappetit.com",
            fallback_url="https://www.bonappetit.com/recipes",
            fallback_title="Click to see Bon Appetit Recipes Search Page",
            rule=LinkRule(include=("bonappetit.com/recipe/",)),
        ),
        _extractor_site(
            "budgetbytes",
            "Budget Bytes",
            "https://www.budgetbytes.com/?s={query}",
            "?s=",
            "https://www.budgetbytes.com",
            fallback_url="https://www.budgetbytes.com/?s={query}",
            rule=LinkRule(include=("budgetbytes.com/",), exclude=("/category/", "/tag/")),
        ),
        SiteDescriptor(
            site_id="chowhound",
            name="Chowhound",
            url_template="https://www.chowhound.com/search?query={query}",
            query_param="?query=",
            parser=StaticParser(),
            source="static",
            fallback_title="Click to see Chowhound Recipes",
            fallback_url="https://www.chowhound.com/category/recipes/",
        ),
        _extractor_site(
            "cooksillustrated",
            "Cooks Illustrated / America's Test Kitchen",
            "https://www.cooksillustrated.com/search?q={query}",
            "?q=",
            "https://www.americastestkitchen.com",
            fallback_url="https://www.americastestkitchen.com/recipes",
            fallback_title="Click to see America's Test Kitchen Recipes",
            rule=LinkRule(include=("americastestkitchen.com/recipes/",)),
        ),
        _extractor_site(
            "delish",
            "Delish",
            "https://www.delish.com/search/{query}/",
            "{query}",
            "https://www.delish.com",
            fallback_url="https://www.delish.com/search/?q={query}",
        ),
        _extractor_site(
            "eatingwell",
            "EatingWell",
            "https://www.eatingwell.com/search/?q={query}",
            "?q=",
            "https://www.eatingwell.com",
            fallback_url="https://www.eatingwell.com/search/?q={query}",
        ),
        SiteDescriptor(
            site_id="epicurious",
            name="Epicurious",
            url_template="https://www.epicurious.com/search/{query}",
            query_param="{query}",
            parser=HtmlLinkParser(
                rule=LinkRule(include=("/recipes/food/views/",)),
                base_url="https://www.epicurious.com",
                slug_titles=True,
            ),
            fallback_url="https://www.epicurious.com/search?q={query}",
        ),
        _extractor_site(
            "food52",
            "Food52",
            "https://food52.com/search?q={query}",
            "?q=",
            "https://food52.com",
            fallback_url="https://food52.com/recipes",
            fallback_title="Click to see Food52 Recipes",
            rule=LinkRule(include=("food52.com/recipes/",)),
        ),
        _extractor_site(
            "foodnetwork",
            "Food Network",
            "https://www.foodnetwork.com/search/{query}-",
            "{query}-",
            "https://www.foodnetwork.com",
            fallback_url="https://www.foodnetwork.com/search/",
            fallback_title="Click to see FoodNetwork Search Page",
            rule=LinkRule(include=("/recipes/",)),
        ),
        _extractor_site(
            "nytcooking",
            "NY Times Cooking",
            "https://cooking.nytimes.com/search?q={query}",
            "?q=",
            "https://cooking.nytimes.com",
            fallback_url="https://cooking.nytimes.com/search?q={query}",
            fallback_title="Click to see {query} on the NY Times Cooking Website",
            rule=LinkRule(include=("/recipes/",)),
        ),
        _extractor_site(
            "thekitchn",
            "The Kitchn",
            "https://www.thekitchn.com/search?q={query}",
            "?q=",
            "https://www.thekitchn.com",
            fallback_url="https://www.thekitchn.com/search?q={query}",
        ),
        SiteDescriptor(
            site_id="saveur",
            name="Saveur",
            url_template="https://www.saveur.com/search/{query}/",
            query_param="{query}",
            parser=HtmlLinkParser(
                rule=LinkRule(include=("/recipe/", "/article/")),
                base_url="https://www.saveur.com",
                slug_titles=True,
            ),
            fallback_title="Search Saveur.com for {query} recipes",
            fallback_url="https://www.saveur.com/search/{query}",
            singularize_query=True,
        ),
        _extractor_site(
            "seriouseats",
            "Serious Eats",
            "https://www.seriouseats.com/search?q={query}",
            "?q=",
            "https://www.seriouseats.com",
            fallback_url="https://www.seriouseats.com/recipes",
            rule=LinkRule(include=("seriouseats.com/",)),
        ),
        SiteDescriptor(
            site_id="simplyrecipes",
            name="Simply Recipes",
            url_template="https://www.simplyrecipes.com/search?q={query}",
            query_param="?q=",
            parser=HtmlLinkParser(
                rule=LinkRule(include=("simplyrecipes.com/recipes/",)),
                base_url="https://www.simplyrecipes.com",
                title_selector=".card__title-text",
                slug_titles=True,
            ),
            fallback_url="https://www.simplyrecipes.com/search?q={query}",
        ),
        SiteDescriptor(
            site_id="smittenkitchen",
            name="Smitten Kitchen",
            url_template="https://smittenkitchen.com/?s={query}",
            query_param="?s=",
            parser=HtmlLinkParser(
                "h2.entry-title a[href]",
                rule=LinkRule(include=("smittenkitchen.com/",)),
                base_url="https://smittenkitchen.com",
            ),
            fallback_url="https://smittenkitchen.com/?s={query}",
        ),
        _extractor_site(
            "spruceeats",
            "The Spruce Eats",
            "https://www.thespruceeats.com/search?q={query}",
            "?q=",
            "https://www.thespruceeats.com",
            fallback_url="https://www.thespruceeats.com/search?q={query}",
        ),
        SiteDescriptor(
            site_id="tasteofhome",
            name="Taste of Home",
            url_template="https://www.tasteofhome.com/search/index?search={query}",
            query_param="?search=",
            parser=HtmlLinkParser(
                rule=LinkRule(include=("tasteofhome.com/recipes/",), exclude=("/recipes/collection",)),
                base_url="https://www.tasteofhome.com",
                title_selector="h2, h3, h4",
                slug_titles=True,
            ),
            fallback_url="https://www.tasteofhome.com/?s={query}",
        ),
        SiteDescriptor(
            site_id="yummly",
            name="Yummly",
            url_template="https://www.yummlyrecipes.com/?q={query}",
            query_param="?q=",
            parser=HtmlLinkParser(
                rule=LinkRule(include=("yummlyrecipes.com/search/label/",)),
                base_url="https://www.yummlyrecipes.com",
                slug_convert_titles=True,
                require_query_in_title=True,
            ),
            fallback_title="Click to see Yummly Recipes Search Page",
            fallback_url="https://www.yummlyrecipes.com/",
        ),
    ]


def default_registry() -> SiteRegistry:
    return SiteRegistry(build_default_sites())
