"""Per-search state threaded through the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlsplit, urlunsplit

from loguru import logger

from recipe_finder.search.models import Candidate
from recipe_finder.search.titles import normalize_title

MAX_RESULTS = 50


def normalize_url(url: str) -> str | None:
    """Canonical form used for dedup; None for anything that is not an absolute http(s) URL."""
    try:
        parts = urlsplit((url or "").strip())
    except ValueError:
        return None
    scheme = parts.scheme.lower()
    if scheme not in ("http", "https") or not parts.netloc:
        return None

    path = parts.path
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/") or "/"
    return urlunsplit((scheme, parts.netloc.lower(), path, parts.query, ""))


@dataclass(slots=True)
class SearchContext:
    """
    Dedup set, result cap and site label for one search.

    Created when a search starts and dropped when it finishes, so nothing
    here is shared between searches.
    """

    query: str
    site_id: str = ""
    max_results: int = MAX_RESULTS
    candidates: list[Candidate] = field(default_factory=list)
    seen: set[str] = field(default_factory=set)

    @property
    def count(self) -> int:
        return sum(1 for c in self.candidates if not c.is_fallback)

    @property
    def remaining(self) -> int:
        return max(0, self.max_results - self.count)

    @property
    def full(self) -> bool:
        return self.remaining == 0

    def add(self, title: str, url: str) -> bool:
        """Record a real candidate; False when capped, duplicate, untitled or not an http(s) URL."""
        if self.full:
            return False

        key = normalize_url(url)
        if key is None:
            logger.debug("[{}] Skipping non-http link {!r}", self.site_id, url)
            return False
        if key in self.seen:
            return False

        display = normalize_title(title)
        if not display:
            return False

        self.seen.add(key)
        self.candidates.append(Candidate(title=display, url=url.strip()))
        logger.debug("[{}] Candidate {}: {}", self.site_id, self.count, display)
        return True

    def add_fallback(self, title: str, url: str) -> Candidate:
        candidate = Candidate(title=normalize_title(title), url=url, is_fallback=True)
        self.candidates.append(candidate)
        return candidate

    @property
    def has_fallback(self) -> bool:
        return any(c.is_fallback for c in self.candidates)
