"""Tests for quotefeed/mix.py — interleaving and mix composition."""

from __future__ import annotations

import asyncio
import random
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from conftest import make_quote
from quotefeed.mix import MixComposer, interleave
from quotefeed.models import FavoriteQuote, UserQuote

NOW = datetime.now(timezone.utc)


def _fake_service(per_category: dict, random_batch: list | None = None) -> MagicMock:
    service = MagicMock()
    service.fetch_by_category = AsyncMock(side_effect=lambda c: list(per_category.get(c, [])))
    service.fetch_random = AsyncMock(return_value=list(random_batch or []))
    return service


class TestInterleave:
    def test_round_robin(self):
        assert interleave([["a1", "a2", "a3"], ["b1"]]) == ["a1", "b1", "a2", "a3"]

    def test_three_lists(self):
        assert interleave([["a1"], ["b1", "b2"], ["c1"]]) == ["a1", "b1", "c1", "b2"]

    def test_empty_inputs(self):
        assert interleave([]) == []
        assert interleave([[], []]) == []


class TestCompose:
    def test_empty_selection_returns_random_batch(self):
        batch = [make_quote(f"r{i}", f"r{i}") for i in range(20)]
        service = _fake_service({}, batch)
        quotes = asyncio.run(MixComposer(service).compose([]))
        assert quotes == batch
        service.fetch_random.assert_awaited_once_with(20)
        service.fetch_by_category.assert_not_awaited()

    def test_categories_fetched_and_merged(self):
        a = [make_quote(f"a{i}", f"a{i}") for i in range(3)]
        b = [make_quote("b0", "b0")]
        service = _fake_service({"love": a, "hope": b})
        composer = MixComposer(service, rng=random.Random(3))

        quotes = asyncio.run(composer.compose(["love", "hope"]))

        assert sorted(q.id for q in quotes) == ["a0", "a1", "a2", "b0"]
        assert service.fetch_by_category.await_count == 2
        service.fetch_random.assert_not_awaited()

    def test_category_fetches_run_concurrently(self):
        started: list[str] = []
        gate = asyncio.Event()

        async def slow_fetch(category):
            started.append(category)
            await gate.wait()
            return [make_quote(category, category)]

        service = MagicMock()
        service.fetch_by_category = slow_fetch

        async def scenario():
            task = asyncio.create_task(MixComposer(service).compose(["love", "hope"]))
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            snapshot = list(started)
            gate.set()
            return snapshot, await task

        snapshot, quotes = asyncio.run(scenario())
        assert snapshot == ["love", "hope"]
        assert len(quotes) == 2

    def test_local_collections_included(self):
        favorites = [FavoriteQuote(id="f1", text="Saved one", author="X", saved_at=NOW)]
        mine = [UserQuote(id="u1", text="Mine", author="Me", created_at=NOW)]
        service = _fake_service({})
        composer = MixComposer(service, favorites=lambda: favorites, user_quotes=lambda: mine)

        quotes = asyncio.run(composer.compose(["_favorites", "_myquotes"]))

        assert sorted(q.id for q in quotes) == ["f1", "u1"]
        assert all(q.tags == [] and q.author_slug == "" for q in quotes)
        service.fetch_by_category.assert_not_awaited()

    def test_local_quotes_only_for_selected_collections(self):
        favorites = [FavoriteQuote(id="f1", text="Saved", author="X", saved_at=NOW)]
        service = _fake_service({"love": [make_quote("a0", "a0")], "hope": [make_quote("b0", "b0")]})
        composer = MixComposer(service, favorites=lambda: favorites)
        local = composer.local_quotes(["love", "_favorites"])
        assert [q.id for q in local] == ["f1"]

    def test_nothing_found_falls_back_to_random(self):
        batch = [make_quote("r0", "r0")]
        service = _fake_service({}, batch)
        quotes = asyncio.run(MixComposer(service).compose(["unknown", "_favorites"]))
        assert quotes == batch
        service.fetch_random.assert_awaited_once_with(20)

    def test_underscore_ids_never_fetched(self):
        service = _fake_service({"love": [make_quote("a0", "a0")]})
        quotes = asyncio.run(MixComposer(service).compose(["love", "_archived"]))
        assert [q.id for q in quotes] == ["a0"]
        service.fetch_by_category.assert_awaited_once_with("love")

    def test_duplicate_selection_fetched_once(self):
        service = _fake_service({"love": [make_quote("a0", "a0")]})
        asyncio.run(MixComposer(service).compose(["love", "love"]))
        assert service.fetch_by_category.await_count == 1
