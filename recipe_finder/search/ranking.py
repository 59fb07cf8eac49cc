"""Token-containment ranking for quoted searches."""

from __future__ import annotations

import re
from collections.abc import Iterable

from recipe_finder.search.models import Candidate, MatchKind, QueryInterpretation, RankedResult


def contains_token(title: str, token: str) -> bool:
    """
    True when token occurs in the lowercased title as a whole word.

    "roast" matches "Classic Roast Chicken" but not "Roasted Chicken Thighs".
    """
    pattern = rf"(?<!\w){re.escape(token)}(?!\w)"
    return re.search(pattern, title.lower()) is not None


def classify(title: str, tokens: tuple[str, ...]) -> tuple[MatchKind, int]:
    """Return (match kind, matched count) of a title against decisive tokens."""
    matched = sum(1 for token in tokens if contains_token(title, token))
    total = len(tokens)
    if total > 0 and matched == total:
        return "perfect", matched
    if 0 < matched < total:
        return "partial", matched
    return "none", matched


def rank_candidates(
    candidates: Iterable[Candidate],
    query: QueryInterpretation,
) -> list[RankedResult]:
    """
    Filter and label candidates against the query.

    Only paired-quote queries are classified; non-matching titles are
    dropped. Other queries pass every candidate through in emission order.
    Fallback candidates are never ranked.
    """
    real = [c for c in candidates if not c.is_fallback]
    if query.quote_state != "paired":
        return [RankedResult(candidate=c) for c in real]

    tokens = query.decisive_tokens
    results: list[RankedResult] = []
    for candidate in real:
        kind, matched = classify(candidate.title, tokens)
        if kind == "none":
            continue
        results.append(
            RankedResult(
                candidate=candidate,
                match=kind,
                matched_tokens=matched,
                total_tokens=len(tokens),
            )
        )
    return results
