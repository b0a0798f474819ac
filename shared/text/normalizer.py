"""Text normalisation applied to every string before it is embedded.

Both documents (entity text) and search queries go through normalize() so the
two sides of a similarity comparison see the same vocabulary.
"""

import re

MAX_TEXT_LENGTH = 64000          # characters, embed-v4.0 accepts ~128k tokens
WORD_BOUNDARY_MIN_RATIO = 0.8    # never backtrack past 80% of MAX_TEXT_LENGTH
MIN_TOKEN_LENGTH = 3

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    "is", "are", "was", "were", "be", "been", "being", "have", "has", "had", "do", "does", "did",
    "will", "would", "could", "should", "may", "might", "can", "must", "shall",
})

# generic e-learning filler that dominates similarity scores without carrying topic
EDUCATIONAL_NOISE_WORDS = frozenset({
    "introduction", "intro", "introductory",
    "getting", "started", "start", "starting",
    "complete", "comprehensive", "full", "total",
    "tutorial", "tutorials", "guide", "guides",
    "course", "courses", "class", "classes",
    "lesson", "lessons", "lecture", "lectures",
    "chapter", "chapters", "section", "sections",
    "part", "parts", "module", "modules",
    "step", "steps",
    "learn", "learning", "study", "studying",
    "understanding", "understand",
    "example", "examples",
})

_NON_WORD = re.compile(r"[^\w\s|]")
_WHITESPACE = re.compile(r"\s+")
_HTML_TAG = re.compile(r"<[^>]*>")
_MD_BOLD = re.compile(r"\*\*([^*]+)\*\*")
_MD_ITALIC = re.compile(r"\*([^*]+)\*")
_MD_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")


def strip_markup(text: str | None) -> str:
    """Remove HTML tags and common markdown emphasis/link syntax.

    Tags become spaces, `**x**` and `*x*` become `x`, `[text](url)` becomes
    `text`. Whitespace is collapsed afterwards.

    Args:
        text (str | None): Free text from a description field.

    Returns:
        str: Plain text, or "" for empty input.
    """
    if not text:
        return ""
    text = _HTML_TAG.sub(" ", text)
    text = _MD_BOLD.sub(r"\1", text)
    text = _MD_ITALIC.sub(r"\1", text)
    text = _MD_LINK.sub(r"\1", text)
    return _WHITESPACE.sub(" ", text).strip()


def truncate_text(text: str, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Cut text to max_length, preferring the last word boundary.

    The boundary is only used when it lies beyond 80% of max_length,
    otherwise the hard cut stands.
    """
    if len(text) <= max_length:
        return text
    text = text[:max_length]
    last_space = text.rfind(" ")
    if last_space > max_length * WORD_BOUNDARY_MIN_RATIO:
        text = text[:last_space]
    return text


def normalize(raw_text: str | None, remove_noise_words: bool = True, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Normalise text for embedding.

    Lower-cases, replaces everything except word characters, whitespace and
    the `|` delimiter with spaces, drops short tokens, stop words and
    (optionally) educational noise words, then truncates.

    Repeated tokens are kept; roadmap sequence weighting relies on that.

    Args:
        raw_text (str | None): The text to normalise.
        remove_noise_words (bool): Also drop EDUCATIONAL_NOISE_WORDS.
        max_length (int): Maximum length of the result.

    Returns:
        str: The normalised text. Deterministic for identical input.
    """
    if not raw_text:
        return ""
    processed = _NON_WORD.sub(" ", raw_text.lower())
    processed = _WHITESPACE.sub(" ", processed).strip()

    kept = [
        word for word in processed.split(" ")
        if len(word) >= MIN_TOKEN_LENGTH
        and word not in STOP_WORDS
        and not (remove_noise_words and word in EDUCATIONAL_NOISE_WORDS)
    ]
    return truncate_text(" ".join(kept), max_length)
