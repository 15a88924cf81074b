"""Lexical retrieval over the knowledge base.

Scoring per query token (tokens of 3 characters or fewer are dropped):

- +10 if the title contains the token
- +5 if the category equals the token
- +1 per occurrence of the token in the content

All comparisons are case-insensitive. Entries scoring zero are dropped,
the rest are ranked by score with ties kept in knowledge-base order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from healthyai.knowledge.models import RetrievalResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from healthyai.knowledge.models import KnowledgeEntry

MIN_TOKEN_LENGTH = 4
TITLE_WEIGHT = 10
CATEGORY_WEIGHT = 5
DEFAULT_MAX_RESULTS = 3


def tokenize(query: str) -> list[str]:
    """Lowercase, split on whitespace, drop short stop-word-like tokens."""
    return [t for t in query.lower().split() if len(t) >= MIN_TOKEN_LENGTH]


def score_entry(entry: KnowledgeEntry, tokens: Iterable[str]) -> int:
    title = entry.title.lower()
    category = entry.category.lower()
    content = entry.content.lower()

    score = 0
    for token in tokens:
        if token in title:
            score += TITLE_WEIGHT
        if category == token:
            score += CATEGORY_WEIGHT
        score += content.count(token)
    return score


def find_relevant(
    query: str,
    entries: Iterable[KnowledgeEntry],
    max_results: int = DEFAULT_MAX_RESULTS,
) -> list[RetrievalResult]:
    """Return up to *max_results* entries relevant to *query*, best first."""
    tokens = tokenize(query)
    if not tokens:
        return []

    scored = [RetrievalResult(entry=e, score=score_entry(e, tokens)) for e in entries]
    ranked = sorted((r for r in scored if r.score > 0), key=lambda r: r.score, reverse=True)
    return ranked[:max_results]
