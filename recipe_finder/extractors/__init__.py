"""Browser-automation extractors run out of process."""

from recipe_finder.extractors.invoker import ExtractorInvoker, is_missing_browser_error
from recipe_finder.extractors.script import render_script
from recipe_finder.extractors.templates import TEMPLATES, ExtractorTemplate, get_template

__all__ = [
    "ExtractorInvoker",
    "ExtractorTemplate",
    "TEMPLATES",
    "get_template",
    "is_missing_browser_error",
    "render_script",
]
