"""Shared fixtures: fake upstream sources, quote fixtures, a temp database."""

from __future__ import annotations

import itertools
import random

import pytest

from quotefeed import storage
from quotefeed.cache import QuoteCache
from quotefeed.models import RawQuote
from quotefeed.retrieval import RetrievalService
from quotefeed.taxonomy import Taxonomy


def make_quote(text: str, qid: str = "", author: str = "Anon") -> RawQuote:
    return RawQuote(id=qid, text=text, author=author, length=len(text))


FIXTURE_QUOTES: list[RawQuote] = [
    make_quote("Achieve your goals with determination and hard work.", "q1", "Test Author"),
    make_quote("Find inner peace and calm in the present moment.", "q2", "Zen Master"),
    make_quote("Love is the greatest force in the universe, warming all hearts.", "q3", "Poet"),
    make_quote("Hope shines bright even in the darkest of nights, believe in tomorrow.", "q4", "Optimist"),
    make_quote("Grow, learn, evolve, become who you are meant to be.", "q5", "Coach"),
]


class RepeatingSource:
    """Returns the same batch on every fetch."""

    def __init__(self, batch: list[RawQuote]) -> None:
        self.batch = batch
        self.calls = 0

    async def fetch(self) -> list[RawQuote]:
        self.calls += 1
        return list(self.batch)


class ScriptedSource:
    """Returns the given batches in order, then empty batches."""

    def __init__(self, *batches: list[RawQuote]) -> None:
        self.batches = list(batches)
        self.calls = 0

    async def fetch(self) -> list[RawQuote]:
        self.calls += 1
        return list(self.batches.pop(0)) if self.batches else []


class EndlessSource:
    """Returns *size* never-seen-before quotes on every fetch.

    Every third quote mentions "love"; the rest are neutral.
    """

    def __init__(self, size: int = 20) -> None:
        self.size = size
        self.calls = 0
        self._counter = itertools.count()

    async def fetch(self) -> list[RawQuote]:
        self.calls += 1
        batch = []
        for _ in range(self.size):
            n = next(self._counter)
            text = f"Love endures, note {n}." if n % 3 == 0 else f"Plain words, note {n}."
            batch.append(make_quote(text, f"e{n}", f"Author {n % 4}"))
        return batch


@pytest.fixture
def fixture_taxonomy() -> Taxonomy:
    return Taxonomy(
        categories={
            "love": ["love", "heart", "warm"],
            "hope": ["hope", "believe", "bright", "tomorrow"],
            "motivation": ["achieve", "determination", "work"],
            "peace": ["peace", "calm"],
        },
        moods={"anxious": ["peace", "calm", "breath"]},
        topics={"love": ["romance"], "growth": ["grow", "learn", "evolve"]},
    )


@pytest.fixture
def make_service(fixture_taxonomy):
    """Build a RetrievalService over a given source with a seeded RNG."""

    def _make(source) -> RetrievalService:
        return RetrievalService(QuoteCache(source), fixture_taxonomy, rng=random.Random(7))

    return _make


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    """Point DB_PATH to a fresh temp file for each test."""
    db_file = tmp_path / "test_quotefeed.db"
    monkeypatch.setenv("DB_PATH", str(db_file))
    storage.init_db()
    yield db_file
