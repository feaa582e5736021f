"""Text normalization and keyword helpers for duplicate checks (no LLM calls)."""

from __future__ import annotations

import re

from models import ProjectRecord

MIN_KEYWORD_LENGTH = 4

_TOKEN_SPLIT_RE = re.compile(r"[\s.,;:!?]+")

# Articles, prepositions, conjunctions and pronouns, plus filler words that
# show up in almost every student abstract and carry no topic signal.
STOP_WORDS: frozenset[str] = frozenset({
    "a",
    "an",
    "the",
    "is",
    "are",
    "was",
    "were",
    "be",
    "been",
    "and",
    "or",
    "but",
    "nor",
    "of",
    "in",
    "on",
    "at",
    "to",
    "for",
    "from",
    "with",
    "without",
    "into",
    "onto",
    "over",
    "under",
    "about",
    "through",
    "between",
    "by",
    "as",
    "this",
    "that",
    "these",
    "those",
    "which",
    "where",
    "when",
    "while",
    "will",
    "shall",
    "can",
    "could",
    "would",
    "should",
    "also",
    "such",
    "their",
    "there",
    "they",
    "them",
    "its",
    "it",
    "our",
    "we",
    "have",
    "has",
    "had",
    "more",
    "most",
    "very",
    # domain filler
    "project",
    "projects",
    "based",
    "using",
    "used",
    "uses",
    "proposed",
    "propose",
    "abstract",
    "new",
    "paper",
    "work",
})


def strict_normalize(text: str) -> str:
    """Lower-case and keep only alphanumeric characters."""
    return "".join(ch for ch in text.lower() if ch.isalnum())


def is_exact_match(first: str, second: str) -> bool:
    """True when both texts normalize to the same non-empty string."""
    normalized = strict_normalize(first)
    # punctuation-only or blank text is never an exact match of anything
    return bool(normalized) and normalized == strict_normalize(second)


def extract_keywords(text: str, stop_words: frozenset[str] = STOP_WORDS) -> list[str]:
    """Return distinct lower-cased topic keywords in first-seen order."""
    keywords: list[str] = []
    seen: set[str] = set()
    for token in _TOKEN_SPLIT_RE.split(text.lower()):
        if len(token) < MIN_KEYWORD_LENGTH or token in stop_words or token in seen:
            continue
        seen.add(token)
        keywords.append(token)
    return keywords


def matched_keywords(keywords: list[str], project: ProjectRecord) -> list[str]:
    """Keywords that occur (as substrings) in the project's title, abstract or description."""
    haystack = f"{project.title} {project.abstract or ''} {project.description}".lower()
    return [kw for kw in keywords if kw in haystack]


def keyword_similarity(matched: int, total: int) -> int:
    """Percentage of submission keywords found in a project, rounded down."""
    if total <= 0:
        return 0
    return matched * 100 // total
