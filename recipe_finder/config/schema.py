"""Configuration schema using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

DEFAULT_STOP_WORDS = [
    "a", "an", "the", "and", "or", "with", "of", "in", "on", "at", "to", "for", "by",
]

DEFAULT_PROTECTED_WORDS = [
    "anchovies", "bagels", "beans", "berries", "brownies", "buns", "carrots",
    "chaffles", "chips", "clams", "cookies", "crackers", "cupcakes", "dumplings",
    "eggs", "fries", "greens", "grits", "herbs", "lentils", "loaves", "meatballs",
    "muffins", "mussels", "nachos", "noodles", "nuts", "olives", "pancakes",
    "peppers", "pickles", "pies", "ribs", "sandwiches", "sausages", "scallops",
    "seeds", "shrimp", "snacks", "spaghetti", "spices", "sprouts", "sweets",
    "tacos", "treats", "vegetables", "veggies", "waffles", "wraps", "zoodles",
]

DEFAULT_PROTECTED_PHRASES = [
    "apple cider", "apple slices", "baking powder", "baking soda", "bread crumbs",
    "brown rice", "brown sugar", "cocoa powder", "chocolate chips", "cooking oil",
    "corn flakes", "cream cheese", "cream of tartar", "cream sauce", "dark chocolate",
    "fried oysters", "french fries", "green beans", "green onions", "green peas",
    "hot chili", "hot dogs", "hot sauce", "lemon zest", "mixed nuts", "olive oil",
    "orange juice", "potato chips", "red onions", "red pepper", "soy sauce",
    "strawberry jam", "sweet chili", "sweet corn", "sweet potatoes",
    "vanilla extract", "whole wheat",
]


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FetchConfig(Base):
    """HTTP fetch settings for sites parsed from downloaded HTML."""

    timeout_s: float = Field(default=15.0, gt=0)
    user_agent: str = DEFAULT_USER_AGENT
    follow_redirects: bool = True


class ExtractorConfig(Base):
    """Browser-automation extractor settings."""

    python_executable: str = ""  # Empty means the running interpreter
    timeout_s: int = Field(default=60, ge=1, le=600)
    headless: bool = True
    navigation_timeout_ms: int = Field(default=30000, ge=1000)


class SearchConfig(Base):
    """Search pipeline settings."""

    max_results: int = Field(default=50, ge=1, le=50)
    default_site: str = "allrecipes"


class VocabularyConfig(Base):
    """Word tables used by the query interpreter."""

    stop_words: list[str] = Field(default_factory=lambda: list(DEFAULT_STOP_WORDS))
    protected_words: list[str] = Field(default_factory=lambda: list(DEFAULT_PROTECTED_WORDS))
    protected_phrases: list[str] = Field(default_factory=lambda: list(DEFAULT_PROTECTED_PHRASES))


class Config(Base):
    """Root configuration for recipe_finder."""

    fetch: FetchConfig = Field(default_factory=FetchConfig)
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    vocabulary: VocabularyConfig = Field(default_factory=VocabularyConfig)
