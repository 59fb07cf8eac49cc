"""Configuration schema and loading helpers."""

from recipe_finder.config.loader import get_config_path, load_config, save_config
from recipe_finder.config.schema import (
    Config,
    ExtractorConfig,
    FetchConfig,
    SearchConfig,
    VocabularyConfig,
)

__all__ = [
    "Config",
    "ExtractorConfig",
    "FetchConfig",
    "SearchConfig",
    "VocabularyConfig",
    "get_config_path",
    "load_config",
    "save_config",
]
