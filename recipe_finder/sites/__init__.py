"""Recipe site descriptors, parsers and the registry."""

from recipe_finder.sites.base import (
    ExtractorJsonParser,
    HtmlLinkParser,
    LinkRule,
    SiteDescriptor,
    SiteParser,
    StaticParser,
)
from recipe_finder.sites.registry import SiteRegistry, build_default_sites, default_registry

__all__ = [
    "ExtractorJsonParser",
    "HtmlLinkParser",
    "LinkRule",
    "SiteDescriptor",
    "SiteParser",
    "SiteRegistry",
    "StaticParser",
    "build_default_sites",
    "default_registry",
]
