import pytest

from recipe_finder.extractors.templates import TEMPLATES
from recipe_finder.search.context import SearchContext
from recipe_finder.search.errors import InputError, SiteNotFoundError
from recipe_finder.sites.base import LinkRule, SiteDescriptor, StaticParser
from recipe_finder.sites.registry import SiteRegistry, build_default_sites, default_registry


def test_default_registry_has_twenty_sites() -> None:
    registry = default_registry()

    assert len(registry) == 20
    assert registry.ids()[:3] == ["allrecipes", "bbcgoodfood", "bonappetit"]
    assert "yummly" in registry
    assert "YUMMLY " in registry


def test_resolve_is_case_insensitive() -> None:
    site = default_registry().resolve(" Saveur ")

    assert site.name == "Saveur"
    assert site.singularize_query is True


def test_resolve_unknown_site() -> None:
    with pytest.raises(SiteNotFoundError, match="unknown recipe site: pinterest") as exc:
        default_registry().resolve("pinterest")

    assert isinstance(exc.value, InputError)
    assert exc.value.site_id == "pinterest"


def test_every_site_has_one_query_placeholder_and_a_fallback() -> None:
    for site in build_default_sites():
        assert site.url_template.count("{query}") == 1, site.site_id
        fallback = site.fallback("roast chicken")
        assert fallback is not None and fallback.is_fallback
        assert fallback.url.startswith("https://")
        assert "{query}" not in fallback.url


def test_extractor_sites_have_templates() -> None:
    for site in build_default_sites():
        if site.source == "extractor":
            assert site.extractor_id in TEMPLATES, site.site_id
        else:
            assert site.extractor_id == ""


def test_search_url_percent_encodes_query() -> None:
    registry = default_registry()

    assert registry.resolve("foodnetwork").search_url("mac & cheese") == (
        "https://www.foodnetwork.com/search/mac%20%26%20cheese-"
    )
    assert registry.resolve("tasteofhome").search_url('"pot roast"') == (
        "https://www.tasteofhome.com/search/index?search=%22pot%20roast%22"
    )


def test_fallback_is_deterministic() -> None:
    site = default_registry().resolve("bbcgoodfood")

    assert site.fallback("beef stew") == site.fallback("beef stew")
    assert site.fallback("beef stew").url == "https://www.bbcgoodfood.com/search?q=beef%20stew"


def test_new_sites_register_without_touching_dispatch() -> None:
    registry = SiteRegistry(build_default_sites())
    registry.register(
        SiteDescriptor(
            site_id="example",
            name="Example Kitchen",
            url_template="https://kitchen.example/?q={query}",
            query_param="?q=",
            parser=StaticParser(LinkRule()),
            source="static",
            fallback_url="https://kitchen.example/?q={query}",
        )
    )
    site = registry.resolve("example")
    ctx = SearchContext(query="chili", site_id="example")

    assert [c.title for c in site.parse(None, ctx, "chili")] == [
        "Click To See Example Kitchen Search Page"
    ]


def test_duplicate_registration_is_rejected() -> None:
    registry = default_registry()
    with pytest.raises(ValueError, match="duplicate"):
        registry.register(build_default_sites()[0])
