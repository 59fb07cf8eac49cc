"""Display-title normalization."""

from __future__ import annotations

import re
from urllib.parse import unquote, urlsplit

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z])(?=[A-Z])")
_DIGIT_RUN = re.compile(r"\d[\d,]*")


def strip_control_chars(text: str) -> str:
    return "".join(ch for ch in text if ord(ch) >= 32 and ord(ch) != 127)


def capitalize_words(text: str) -> str:
    """Uppercase the first letter of each space-delimited word and lowercase the rest."""
    out: list[str] = []
    capitalize_next = True
    for ch in text:
        if capitalize_next and ch.isalpha():
            out.append(ch.upper())
            capitalize_next = False
        else:
            out.append(ch.lower())
        if ch == " ":
            capitalize_next = True
    return "".join(out)


def split_title_and_digits(title: str) -> str:
    """
    Insert " - " before a trailing digit run glued onto the title text.

    "Ribs1,234 Ratings" -> "Ribs - 1,234 Ratings"
    "Ribs(1,234 Ratings)" -> "Ribs - (1,234 Ratings)"
    "Rib1234" is left alone because the digits sit inside a word.
    """
    runs = list(_DIGIT_RUN.finditer(title))
    if not runs:
        return title

    run = runs[-1]
    start, end = run.start(), run.end()
    if start == 0:
        return title

    before = title[start - 1]
    after = title[end] if end < len(title) else ""
    if before.isspace():
        return title
    if before.isalpha() and (not after or after.isalpha()):
        return title

    if before == "(":
        head = title[:start - 1].rstrip()
        if not head:
            return title
        return f"{head} - {title[start - 1:]}"
    return f"{title[:start]} - {title[start:]}"


def normalize_title(title: str) -> str:
    """Trim, drop control characters, separate glued digit runs, capitalize words."""
    # Tabs and newlines become spaces before other control characters are dropped.
    text = " ".join((title or "").split())
    text = " ".join(strip_control_chars(text).split())
    text = split_title_and_digits(text)
    return capitalize_words(text)


def slug_to_title(slug: str) -> str:
    """Turn "roast-chicken", "roast_chicken" or "RoastChicken" into space-separated words."""
    text = (slug or "").strip()
    if not text:
        return ""
    if any(ch in text for ch in " -_"):
        text = text.replace("-", " ").replace("_", " ")
    else:
        text = _CAMEL_BOUNDARY.sub(" ", text)
    return " ".join(text.split())


def url_slug(url: str) -> str:
    """Last non-empty path segment of a URL, percent-decoded."""
    path = urlsplit(url or "").path
    segments = [s for s in path.split("/") if s]
    if not segments:
        return ""
    return unquote(segments[-1])
