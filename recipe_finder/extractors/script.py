"""Generated Playwright script run by the extractor subprocess."""

from __future__ import annotations

import json
from string import Template

from recipe_finder.extractors.templates import ExtractorTemplate

# Prints a JSON array of {"title", "url"} objects on stdout; everything else goes to stderr.
SCRIPT_TEMPLATE = Template('''\
import json
import sys
from urllib.parse import quote

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

CONFIG = json.loads($config)
HEADLESS = $headless
NAVIGATION_TIMEOUT_MS = $navigation_timeout_ms

COLLECT_JS = """(anchors, titleSelector) => anchors.map(a => {
    const nested = titleSelector ? a.querySelector(titleSelector) : null;
    const text = (nested && nested.innerText) || a.innerText || a.getAttribute('title') || '';
    return { title: text.trim(), url: a.href };
})"""


def log(message):
    print(message, file=sys.stderr)


def keep(item, seen):
    url = item.get("url") or ""
    title = item.get("title") or ""
    if not url or not title or url in seen:
        return False
    if CONFIG["hrefContains"] and not any(s in url for s in CONFIG["hrefContains"]):
        return False
    if any(s in url for s in CONFIG["hrefExcludes"]):
        return False
    seen.add(url)
    return True


def scrape(page, url):
    if CONFIG["blockAssets"]:
        page.route("**/*.{png,jpg,jpeg,gif,webp,css,woff,woff2}", lambda route: route.abort())
    page.goto(url, wait_until=CONFIG["waitUntil"], timeout=NAVIGATION_TIMEOUT_MS)

    if CONFIG["waitForSelector"]:
        try:
            page.wait_for_selector(CONFIG["waitForSelector"], timeout=CONFIG["selectorTimeoutMs"])
        except PlaywrightError as e:
            log(f"wait for {CONFIG['waitForSelector']} failed: {e}")

    for _ in range(CONFIG["scrollPasses"]):
        page.evaluate("window.scrollBy(0, window.innerHeight)")
        page.wait_for_timeout(CONFIG["scrollDelayMs"])

    return page.eval_on_selector_all(CONFIG["linkSelector"], COLLECT_JS, CONFIG["titleSelector"])


def main():
    term = sys.argv[1] if len(sys.argv) > 1 else ""
    url = CONFIG["searchUrl"].replace("{query}", quote(term, safe=""))
    log(f"loading {url}")

    with sync_playwright() as p:
        browser = p.chromium.launch(headless=HEADLESS)
        try:
            raw = scrape(browser.new_page(), url)
        finally:
            browser.close()

    seen = set()
    results = [{"title": i["title"], "url": i["url"]} for i in raw if keep(i, seen)]
    log(f"collected {len(results)} links")
    print(json.dumps(results))


if __name__ == "__main__":
    main()
''')


def render_script(
    template: ExtractorTemplate,
    *,
    headless: bool = True,
    navigation_timeout_ms: int = 30000,
) -> str:
    """Fill the script template for one site."""
    return SCRIPT_TEMPLATE.substitute(
        config=repr(json.dumps(template.as_script_config())),
        headless=repr(bool(headless)),
        navigation_timeout_ms=int(navigation_timeout_ms),
    )
