"""Per-site parameters for the generated browser-automation script."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

WaitUntil = Literal["domcontentloaded", "load", "networkidle"]


@dataclass(slots=True, frozen=True)
class ExtractorTemplate:
    """
    What the browser script does for one site.

    `search_url` holds one `{query}` placeholder; the script fills it with
    the percent-encoded command-line argument. `href_contains` and
    `href_excludes` are substring filters applied inside the page.
    """

    template_id: str
    search_url: str
    link_selector: str
    title_selector: str = ""
    href_contains: tuple[str, ...] = ()
    href_excludes: tuple[str, ...] = ()
    wait_for_selector: str = ""
    wait_until: WaitUntil = "domcontentloaded"
    scroll_passes: int = 3
    scroll_delay_ms: int = 500
    selector_timeout_ms: int = 5000
    block_assets: bool = False

    def as_script_config(self) -> dict[str, object]:
        return {
            "searchUrl": self.search_url,
            "linkSelector": self.link_selector,
            "titleSelector": self.title_selector,
            "hrefContains": list(self.href_contains),
            "hrefExcludes": list(self.href_excludes),
            "waitForSelector": self.wait_for_selector,
            "waitUntil": self.wait_until,
            "scrollPasses": self.scroll_passes,
            "scrollDelayMs": self.scroll_delay_ms,
            "selectorTimeoutMs": self.selector_timeout_ms,
            "blockAssets": self.block_assets,
        }


_ALL = (
    ExtractorTemplate(
        template_id="allrecipes",
        search_url="https://www.allrecipes.com/search?q={query}",
        link_selector='a[href*="/recipe/"]',
        title_selector=".card__title-text",
        href_excludes=("/video/",),
        scroll_passes=5,
    ),
    ExtractorTemplate(
        template_id="bbcgoodfood",
        search_url="https://www.bbcgoodfood.com/search/recipes?q={query}",
        link_selector='a[href*="/recipes/"]',
        title_selector="h2, h3",
        href_excludes=("/recipes/collection/", "/recipes/category/"),
        wait_until="networkidle",
    ),
    ExtractorTemplate(
        template_id="bonappetit",
        search_url="https://www.bonappetit.com/search?q={query}",
        link_selector='a[href*="/recipe/"]',
        title_selector="h2, h3",
        href_contains=("https://www.bonappetit.com/recipe/",),
    ),
    ExtractorTemplate(
        template_id="budgetbytes",
        search_url="https://www.budgetbytes.com/?s={query}",
        link_selector="article a[href], h2 a[href]",
        href_contains=("budgetbytes.com/",),
        href_excludes=("/category/", "/tag/", "/page/", "#"),
        block_assets=True,
    ),
    ExtractorTemplate(
        template_id="cooksillustrated",
        search_url="https://www.americastestkitchen.com/search?q={query}",
        link_selector='a[href*="/recipes/"]',
        href_contains=("https://www.americastestkitchen.com/recipes/",),
    ),
    ExtractorTemplate(
        template_id="delish",
        search_url="https://www.delish.com/search/?s={query}",
        link_selector="a.card__link",
        title_selector=".card__title, h2, h3",
    ),
    ExtractorTemplate(
        template_id="eatingwell",
        search_url="https://www.eatingwell.com/search/?q={query}",
        link_selector="a.comp.mntl-card-list-items__link",
        title_selector=".card__title-text",
        wait_for_selector="a.comp.mntl-card-list-items__link",
        selector_timeout_ms=4000,
        scroll_passes=1,
        block_assets=True,
    ),
    ExtractorTemplate(
        template_id="food52",
        search_url="https://food52.com/recipes/search?q={query}",
        link_selector='a[href^="/recipes/"]',
        href_contains=("/recipes/",),
    ),
    ExtractorTemplate(
        template_id="foodnetwork",
        search_url="https://www.foodnetwork.com/search/{query}-",
        link_selector='a[href*="/recipes/"]',
        title_selector="h3, .m-MediaBlock__a-HeadlineText",
        href_excludes=("/recipes/photos/", "/recipes/packages/"),
        scroll_passes=8,
        scroll_delay_ms=300,
    ),
    ExtractorTemplate(
        template_id="nytcooking",
        search_url="https://cooking.nytimes.com/search?q={query}",
        link_selector='a[href^="/recipes/"]',
        title_selector="h3, h2",
    ),
    ExtractorTemplate(
        template_id="thekitchn",
        search_url="https://www.thekitchn.com/search?q={query}",
        link_selector='a[href*="/recipe-"], a[href*="-recipe-"]',
        title_selector="h2, h3",
        wait_until="networkidle",
    ),
    ExtractorTemplate(
        template_id="seriouseats",
        search_url="https://www.seriouseats.com/search?q={query}",
        link_selector='a[href*="-recipe"]',
        title_selector="h3, h4, span",
        href_contains=("https://www.seriouseats.com/",),
        wait_for_selector='a[href*="-recipe"]',
        scroll_passes=6,
        scroll_delay_ms=200,
    ),
    ExtractorTemplate(
        template_id="spruceeats",
        search_url="https://www.thespruceeats.com/search?q={query}",
        link_selector="a.card__title-link, a.comp.card",
        title_selector=".card__title-text",
        href_contains=("thespruceeats.com/",),
    ),
)

TEMPLATES: dict[str, ExtractorTemplate] = {t.template_id: t for t in _ALL}


def get_template(template_id: str) -> ExtractorTemplate | None:
    return TEMPLATES.get(template_id)
