"""Tests for quotefeed/taxonomy.py — table loading and lookups."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from quotefeed.taxonomy import Taxonomy, load_taxonomy


class TestBundledTaxonomy:
    def test_loads_all_tables(self):
        taxonomy = load_taxonomy()
        assert "love" in taxonomy.categories
        assert "anxious" in taxonomy.moods
        assert "self-love" in taxonomy.topics

    def test_keywords_are_lowercase(self):
        taxonomy = load_taxonomy()
        for table in (taxonomy.categories, taxonomy.moods, taxonomy.topics):
            for keywords in table.values():
                assert all(kw == kw.lower() for kw in keywords)

    def test_reserved_ids_are_not_categories(self):
        taxonomy = load_taxonomy()
        assert "_favorites" not in taxonomy.categories
        assert "_myquotes" not in taxonomy.categories


class TestLoadFromFile:
    def test_custom_file(self, tmp_path):
        path = tmp_path / "taxonomy.json"
        path.write_text(json.dumps({"categories": {"calm": ["Peace", "QUIET"]}}))
        taxonomy = load_taxonomy(path)
        assert taxonomy.category_keywords("calm") == ["peace", "quiet"]
        assert taxonomy.moods == {}

    def test_invalid_file_raises(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"categories": ["not", "a", "mapping"]}))
        with pytest.raises(ValidationError):
            load_taxonomy(path)


class TestLookups:
    def test_unknown_ids_return_empty(self, fixture_taxonomy):
        assert fixture_taxonomy.category_keywords("nope") == []
        assert fixture_taxonomy.mood_keywords("nope") == []
        assert fixture_taxonomy.topic_keywords("nope") == []

    def test_returned_list_is_a_copy(self, fixture_taxonomy):
        fixture_taxonomy.category_keywords("love").append("mutated")
        assert "mutated" not in fixture_taxonomy.category_keywords("love")

    def test_topic_prefers_category_alias(self, fixture_taxonomy):
        table, keywords = fixture_taxonomy.resolve_topic("love")
        assert table == "category"
        assert keywords == ["love", "heart", "warm"]

    def test_topic_falls_back_to_topic_table(self, fixture_taxonomy):
        assert fixture_taxonomy.resolve_topic("growth") == ("topic", ["grow", "learn", "evolve"])

    def test_tag_expansion(self, fixture_taxonomy):
        assert fixture_taxonomy.tag_keywords(["peace", "Sunrise"]) == ["peace", "calm", "sunrise"]

    def test_taxonomy_is_frozen(self):
        taxonomy = Taxonomy(categories={"a": ["x"]})
        with pytest.raises(ValidationError):
            taxonomy.categories = {}
