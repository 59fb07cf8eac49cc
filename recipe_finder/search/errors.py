"""Error taxonomy for the search pipeline."""


class RecipeSearchError(Exception):
    """Base class for all search pipeline errors."""


class InputError(RecipeSearchError):
    """Raised for an empty query, an unknown site, or an unencodable query."""


class SiteNotFoundError(InputError):
    """Raised when a site id is not in the registry."""

    def __init__(self, site_id: str):
        super().__init__(f"unknown recipe site: {site_id}")
        self.site_id = site_id


class SearchInProgressError(InputError):
    """Raised when a search is submitted while another one is still running."""


class FetchError(RecipeSearchError):
    """Raised when an HTTP fetch fails, times out, or exhausts the response buffer."""


class InvokeError(RecipeSearchError):
    """Raised when the external extractor fails, times out, or prints unusable output."""


class ParseError(RecipeSearchError):
    """Raised by parser strategies for malformed content; never escapes a parser."""
