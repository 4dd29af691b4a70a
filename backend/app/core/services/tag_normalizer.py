"""Tag canonicalization and near-duplicate detection.

Tags proposed by the AI providers (or typed by users) are folded onto the
vocabulary a user already has, so "Machine-Learning", "machine learning" and
"the machine learnings" do not end up as three separate tags.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

DEFAULT_SIMILARITY_THRESHOLD = 0.85

# Terms that look like plurals (or carry an article-like prefix) but must not be touched
PRESERVED_TERMS = frozenset({
    "aws",
    "apis",
    "dns",
    "ios",
    "macos",
    "css",
    "sass",
    "less",
    "news",
    "devops",
    "kubernetes",
    "tensorflow",
    "pandas",
    "redis",
    "postgres",
    "windows",
    "analytics",
    "statistics",
    "physics",
    "mathematics",
    "economics",
    "ethics",
    "politics",
    "robotics",
    "graphics",
    "electronics",
})

LEADING_ARTICLES = ("the ", "a ", "an ")

# Endings after which "es" is a plural marker rather than part of the stem
SIBILANT_ES_SUFFIXES = ("sses", "xes", "ches", "shes")

# Words ending like this are usually singular already (class, status, analysis)
SINGULAR_S_ENDINGS = ("ss", "us", "is")

MIN_STEM_LENGTH = 2


def _accept_stem(stem: str, word: str) -> str:
    # A lone trailing "s" word ("data s") would leave a dangling space
    if len(stem) < MIN_STEM_LENGTH or stem[-1].isspace():
        return word
    return stem


def _singularize(word: str) -> str:
    if word.endswith("ies"):
        return _accept_stem(word[:-3] + "y", word)

    for suffix in SIBILANT_ES_SUFFIXES:
        if word.endswith(suffix):
            return _accept_stem(word[:-2], word)

    if word.endswith("s") and not word.endswith(SINGULAR_S_ENDINGS):
        return _accept_stem(word[:-1], word)

    return word


def normalize_tag(tag: str | None) -> str:
    """Return the canonical form of a tag, or "" when nothing is left.

    Lowercases, trims and collapses whitespace, strips leading English articles
    and collapses simple plural suffixes. Preserved terms are returned as-is.
    The function is idempotent.
    """
    if not tag:
        return ""

    normalized = " ".join(tag.lower().split())
    if normalized in PRESERVED_TERMS:
        return normalized

    stripped = True
    while stripped:
        stripped = False
        for prefix in LEADING_ARTICLES:
            if normalized.startswith(prefix):
                normalized = normalized[len(prefix):].strip()
                stripped = True

    if normalized in PRESERVED_TERMS:
        return normalized

    return _singularize(normalized)


def _bigrams(value: str) -> Counter[str]:
    return Counter(value[i:i + 2] for i in range(len(value) - 1))


def compare_two_strings(first: str, second: str) -> float:
    """Dice coefficient over character bigrams, ignoring whitespace.

    Returns a score in [0, 1]; identical strings score 1.0 and strings shorter
    than two characters (after whitespace removal) score 0.0.
    """
    first = "".join(first.split())
    second = "".join(second.split())

    if first == second:
        return 1.0
    if len(first) < 2 or len(second) < 2:
        return 0.0

    overlap = sum((_bigrams(first) & _bigrams(second)).values())
    return (2.0 * overlap) / (len(first) + len(second) - 2)


def find_best_match(candidate: str, choices: Sequence[str]) -> tuple[str, float] | None:
    """Return the first highest-scoring choice and its score, or None when empty."""
    best: tuple[str, float] | None = None
    for choice in choices:
        score = compare_two_strings(candidate, choice)
        if best is None or score > best[1]:
            best = (choice, score)
    return best


def find_similar_tag(
    candidate: str,
    existing_tags: Sequence[str],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> str | None:
    """Find the existing tag that ``candidate`` duplicates, if any.

    An existing tag that normalizes to the same value wins outright and is
    returned verbatim. Otherwise the best fuzzy match is returned when its
    score reaches ``threshold``.
    """
    if not existing_tags:
        return None

    normalized_candidate = normalize_tag(candidate)

    for tag in existing_tags:
        if normalize_tag(tag) == normalized_candidate:
            return tag

    best = find_best_match(normalized_candidate, existing_tags)
    if best is not None and best[1] >= threshold:
        return best[0]
    return None


def process_tags(
    new_tags: Iterable[str],
    existing_tags: Sequence[str],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> list[str]:
    """Normalize ``new_tags`` and fold them onto ``existing_tags``.

    Returns an ordered, duplicate-free list. A tag that is a near-duplicate of
    an existing one is replaced by the existing spelling, so re-processing the
    output against itself yields the same list.
    """
    processed: dict[str, None] = {}
    for tag in new_tags:
        normalized = normalize_tag(tag)
        if not normalized:
            continue
        similar = find_similar_tag(normalized, existing_tags, threshold)
        processed[similar if similar is not None else normalized] = None
    return list(processed)
