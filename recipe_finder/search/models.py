"""Shared search models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

QuoteState = Literal["none", "unmatched", "paired"]
MatchKind = Literal["perfect", "partial", "none"]
SearchState = Literal["idle", "fetching", "extracting", "ranking", "done"]
OutcomeKind = Literal["success", "fallback", "failure"]

QUOTE_STATUS_MESSAGES: dict[QuoteState, str] = {
    "paired": "Quoted searches behave differently on each website! Searching, please wait ...",
    "unmatched": "Searching for recipes (Note: Please check your unmatched quote marks) ...",
    "none": "Searching for matching recipes. Please wait ...",
}


@dataclass(slots=True, frozen=True)
class Candidate:
    """Normalized recipe link extracted from one site."""

    title: str
    url: str
    is_fallback: bool = False


@dataclass(slots=True, frozen=True)
class RankedResult:
    """Candidate with its match classification."""

    candidate: Candidate
    match: MatchKind = "none"
    matched_tokens: int = 0
    total_tokens: int = 0

    @property
    def title(self) -> str:
        return self.candidate.title

    @property
    def url(self) -> str:
        return self.candidate.url


@dataclass(slots=True, frozen=True)
class QueryInterpretation:
    """Immutable per-search view of the raw query."""

    raw: str
    quote_state: QuoteState
    phrases: tuple[str, ...] = ()
    decisive_tokens: tuple[str, ...] = ()

    @property
    def status_message(self) -> str:
        return QUOTE_STATUS_MESSAGES[self.quote_state]


@dataclass(slots=True)
class SearchOutcome:
    """Terminal value of one search: ranked results, one fallback link, or a failure message."""

    kind: OutcomeKind
    results: list[RankedResult] = field(default_factory=list)
    fallback: Candidate | None = None
    message: str = ""
    query: QueryInterpretation | None = None
    search_url: str | None = None

    @classmethod
    def success(
        cls,
        results: list[RankedResult],
        *,
        query: QueryInterpretation | None = None,
        search_url: str | None = None,
    ) -> "SearchOutcome":
        if not results:
            raise ValueError("a successful outcome needs at least one result")
        return cls("success", results=list(results), query=query, search_url=search_url)

    @classmethod
    def with_fallback(
        cls,
        candidate: Candidate,
        *,
        message: str = "",
        query: QueryInterpretation | None = None,
        search_url: str | None = None,
    ) -> "SearchOutcome":
        return cls(
            "fallback",
            fallback=candidate,
            message=message,
            query=query,
            search_url=search_url,
        )

    @classmethod
    def failure(
        cls,
        message: str,
        *,
        query: QueryInterpretation | None = None,
        search_url: str | None = None,
    ) -> "SearchOutcome":
        return cls("failure", message=message, query=query, search_url=search_url)

    @property
    def ok(self) -> bool:
        return self.kind != "failure"
