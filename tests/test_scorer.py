"""Tests for quotefeed/scorer.py — keyword scoring, filtering, shuffling."""

from __future__ import annotations

import random

from conftest import make_quote
from quotefeed.scorer import filter_by_keywords, keyword_hits, score_by_relevance, shuffled


class TestScoreByRelevance:
    def test_counts_distinct_keywords(self):
        quote = make_quote("Achieve your goals with determination")
        scored = score_by_relevance([quote], ["achieve", "determination", "xyz"])
        assert len(scored) == 1
        assert scored[0].score == 2
        assert scored[0].quote is quote

    def test_zero_score_excluded(self):
        scored = score_by_relevance([make_quote("Nothing relevant here")], ["love"])
        assert scored == []

    def test_case_insensitive_substring(self):
        assert keyword_hits("OPTIMISTIC days", ["optimis"]) == 1

    def test_repeated_keyword_counts_once(self):
        assert keyword_hits("love, love, love", ["love"]) == 1

    def test_descending_order(self):
        one = make_quote("love")
        three = make_quote("love heart warm")
        two = make_quote("love heart")
        scored = score_by_relevance([one, three, two], ["love", "heart", "warm"])
        assert [s.score for s in scored] == [3, 2, 1]
        assert [s.quote for s in scored] == [three, two, one]

    def test_ties_keep_input_order(self):
        first = make_quote("love first")
        second = make_quote("love second")
        third = make_quote("love third")
        scored = score_by_relevance([first, second, third], ["love"])
        assert [s.quote for s in scored] == [first, second, third]


class TestFilterByKeywords:
    def test_inclusion(self):
        keep = make_quote("Hope is bright")
        drop = make_quote("Plain words")
        assert filter_by_keywords([keep, drop], ["hope"]) == [keep]

    def test_empty_keywords_match_everything(self):
        quotes = [make_quote("a"), make_quote("b")]
        assert filter_by_keywords(quotes, []) == quotes


class TestShuffled:
    def test_is_permutation_and_copy(self):
        items = list(range(20))
        result = shuffled(items, random.Random(1))
        assert sorted(result) == items
        assert items == list(range(20))

    def test_empty(self):
        assert shuffled([]) == []
