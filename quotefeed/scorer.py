"""Keyword relevance scoring.

A quote's score is the number of distinct keywords that occur anywhere in its
lower-cased text. Keywords are substrings, not tokens, so ``"optimis"``
matches both "optimism" and "optimistic". Repeated occurrences of one keyword
count once.

This is a presence heuristic: a quote that hits three keywords outranks one
that hits a single, more specific keyword.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional, TypeVar

from quotefeed.models import RawQuote

T = TypeVar("T")


@dataclass
class ScoredQuote:
    """A quote paired with its keyword hit count (always >= 1)."""

    quote: RawQuote
    score: int


def keyword_hits(text: str, keywords: Sequence[str]) -> int:
    """Count how many *keywords* occur in *text* (case-insensitive).

    Examples:
        >>> keyword_hits("Achieve your goals with determination", ["achieve", "xyz"])
        1
    """
    text_lower = text.lower()
    return sum(1 for kw in keywords if kw.lower() in text_lower)


def score_by_relevance(
    quotes: Sequence[RawQuote],
    keywords: Sequence[str],
) -> list[ScoredQuote]:
    """Score and rank quotes against a keyword list.

    Args:
        quotes: Candidate quotes.
        keywords: Keyword substrings.

    Returns:
        ``ScoredQuote`` objects with score > 0, highest score first. Ties keep
        their input order.
    """
    scored = [ScoredQuote(quote=q, score=keyword_hits(q.text, keywords)) for q in quotes]
    scored = [s for s in scored if s.score > 0]
    scored.sort(key=lambda s: s.score, reverse=True)
    return scored


def filter_by_keywords(
    quotes: Sequence[RawQuote],
    keywords: Sequence[str],
) -> list[RawQuote]:
    """Return quotes containing at least one keyword, in input order.

    An empty keyword list matches everything.
    """
    if not keywords:
        return list(quotes)
    return [q for q in quotes if keyword_hits(q.text, keywords) > 0]


def shuffled(items: Sequence[T], rng: Optional[random.Random] = None) -> list[T]:
    """Return a uniformly shuffled copy of *items* (Fisher-Yates)."""
    result = list(items)
    (rng or random).shuffle(result)
    return result
