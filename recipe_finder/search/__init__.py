"""Search pipeline building blocks."""

from recipe_finder.search.context import SearchContext, normalize_url
from recipe_finder.search.errors import (
    FetchError,
    InputError,
    InvokeError,
    ParseError,
    RecipeSearchError,
    SearchInProgressError,
    SiteNotFoundError,
)
from recipe_finder.search.models import (
    Candidate,
    QueryInterpretation,
    RankedResult,
    SearchOutcome,
)
from recipe_finder.search.query import QueryInterpreter
from recipe_finder.search.ranking import rank_candidates

__all__ = [
    "Candidate",
    "FetchError",
    "InputError",
    "InvokeError",
    "ParseError",
    "QueryInterpretation",
    "QueryInterpreter",
    "RankedResult",
    "RecipeSearchError",
    "SearchContext",
    "SearchInProgressError",
    "SearchOutcome",
    "SiteNotFoundError",
    "normalize_url",
    "rank_candidates",
]
