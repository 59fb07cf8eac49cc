"""Query interpretation: quoting, phrases, tokens, singular forms, URL encoding."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from recipe_finder.config.schema import VocabularyConfig
from recipe_finder.search.errors import InputError
from recipe_finder.search.models import QueryInterpretation, QuoteState

QUOTE_CHARS = ("'", '"')

_CURLY_QUOTES = str.maketrans({
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
})


@dataclass(frozen=True, slots=True)
class Vocabulary:
    """Lowercased word tables used for filtering and singularization."""

    stop_words: frozenset[str]
    protected_words: frozenset[str]
    protected_phrases: frozenset[str]

    @classmethod
    def from_config(cls, config: VocabularyConfig | None = None) -> "Vocabulary":
        config = config or VocabularyConfig()
        return cls(
            stop_words=frozenset(w.strip().lower() for w in config.stop_words if w.strip()),
            protected_words=frozenset(w.strip().lower() for w in config.protected_words if w.strip()),
            protected_phrases=frozenset(
                " ".join(p.lower().split()) for p in config.protected_phrases if p.strip()
            ),
        )


DEFAULT_VOCABULARY = Vocabulary.from_config()


def normalize_quotes(text: str) -> str:
    """Replace curly single/double quotes with their ASCII forms."""
    return text.translate(_CURLY_QUOTES)


def _is_escaped(text: str, index: int) -> bool:
    return index > 0 and text[index - 1] == "\\"


def detect_quote_state(query: str) -> QuoteState:
    """
    Classify the quoting of a raw query.

    An even, nonzero count of either unescaped quote character means paired
    quotes; any other nonzero count means an unmatched quote.
    """
    text = normalize_quotes(query or "")
    counts = {q: 0 for q in QUOTE_CHARS}
    for i, ch in enumerate(text):
        if ch in counts and not _is_escaped(text, i):
            counts[ch] += 1

    if any(n > 0 and n % 2 == 0 for n in counts.values()):
        return "paired"
    if any(counts.values()):
        return "unmatched"
    return "none"


def extract_quoted_phrases(query: str) -> list[str]:
    """Return quoted phrases, lowercased and trimmed, in order; stops at an unclosed quote."""
    text = normalize_quotes(query or "")
    phrases: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch not in QUOTE_CHARS or _is_escaped(text, i):
            i += 1
            continue

        end = i + 1
        while end < len(text) and not (text[end] == ch and not _is_escaped(text, end)):
            end += 1
        if end >= len(text):
            break

        phrase = text[i + 1:end].strip().lower()
        if phrase:
            phrases.append(phrase)
        i = end + 1
    return phrases


def tokenize_and_filter(text: str, vocabulary: Vocabulary | None = None) -> list[str]:
    """Lowercase, split on whitespace and drop stop words."""
    stop_words = (vocabulary or DEFAULT_VOCABULARY).stop_words
    return [token for token in (text or "").lower().split() if token not in stop_words]


def singularize(word: str, vocabulary: Vocabulary | None = None) -> str:
    """
    Simplistic English singular form used only for building site queries.

    Protected words and phrases are returned as-is; otherwise a trailing
    "ies" becomes "y", or one trailing "s" is dropped.
    """
    vocab = vocabulary or DEFAULT_VOCABULARY
    text = (word or "").strip()
    lowered = text.lower()
    if not lowered:
        return ""
    if " ".join(lowered.split()) in vocab.protected_phrases:
        return text
    if lowered in vocab.protected_words or lowered.split()[-1] in vocab.protected_words:
        return text

    if len(text) > 3 and lowered.endswith("ies"):
        return text[:-3] + "y"
    if len(text) > 1 and lowered.endswith("s"):
        return text[:-1]
    return text


def url_encode(text: str) -> str:
    """Percent-encode everything but RFC 3986 unreserved characters."""
    try:
        return quote(text, safe="", encoding="utf-8", errors="strict")
    except UnicodeEncodeError as e:
        raise InputError("Failed to encode search term.") from e


class QueryInterpreter:
    """Builds the immutable per-search QueryInterpretation."""

    def __init__(self, vocabulary: Vocabulary | None = None):
        self.vocabulary = vocabulary or DEFAULT_VOCABULARY

    @classmethod
    def from_config(cls, config: VocabularyConfig | None = None) -> "QueryInterpreter":
        return cls(Vocabulary.from_config(config))

    def interpret(self, query: str) -> QueryInterpretation:
        raw = (query or "").strip()
        state = detect_quote_state(raw)
        phrases: tuple[str, ...] = ()
        decisive: tuple[str, ...] = ()
        if state == "paired":
            phrases = tuple(extract_quoted_phrases(raw))
            tokens = self.tokenize(" ".join(phrases))
            decisive = tuple(dict.fromkeys(tokens))
        return QueryInterpretation(
            raw=raw,
            quote_state=state,
            phrases=phrases,
            decisive_tokens=decisive,
        )

    def tokenize(self, text: str) -> list[str]:
        return tokenize_and_filter(text, self.vocabulary)

    def singularize(self, word: str) -> str:
        return singularize(word, self.vocabulary)
