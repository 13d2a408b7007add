"""Keyword taxonomies for category, mood and topic browsing.

Three independent tables map an identifier to an ordered list of lower-case
keyword substrings:

- categories  browse-by-category screen and mix selection
- moods       "how are you feeling" screen
- topics      topic deep links; a topic id that also names a category is an
              alias for that category

The tables ship as ``quotefeed/data/taxonomy.json`` and are loaded once at
start-up. Tests construct a ``Taxonomy`` directly with fixture tables.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

logger = logging.getLogger(__name__)

DEFAULT_TAXONOMY_PATH = Path(__file__).parent / "data" / "taxonomy.json"

#: Mix pseudo-categories backed by local collections rather than the API.
FAVORITES_ID = "_favorites"
MY_QUOTES_ID = "_myquotes"
#: Any id with this prefix is local-only and never sent to the API.
LOCAL_ID_PREFIX = "_"


class Taxonomy(BaseModel):
    """Immutable keyword tables."""

    model_config = ConfigDict(frozen=True)

    categories: dict[str, list[str]] = {}
    moods: dict[str, list[str]] = {}
    topics: dict[str, list[str]] = {}

    @field_validator("categories", "moods", "topics")
    @classmethod
    def _lowercase(cls, table: dict[str, list[str]]) -> dict[str, list[str]]:
        return {
            key: [kw.lower() for kw in keywords if kw]
            for key, keywords in table.items()
        }

    def category_keywords(self, category_id: str) -> list[str]:
        return list(self.categories.get(category_id, []))

    def mood_keywords(self, mood_id: str) -> list[str]:
        return list(self.moods.get(mood_id, []))

    def topic_keywords(self, topic_id: str) -> list[str]:
        return list(self.topics.get(topic_id, []))

    def resolve_topic(self, topic_id: str) -> tuple[str, list[str]]:
        """Resolve a topic id, checking the category table first.

        Returns:
            ``("category", keywords)`` when *topic_id* is a category alias,
            otherwise ``("topic", keywords)``. Keywords are ``[]`` when the
            id is unknown to both tables.
        """
        keywords = self.category_keywords(topic_id)
        if keywords:
            return "category", keywords
        return "topic", self.topic_keywords(topic_id)

    def tag_keywords(self, tags: list[str]) -> list[str]:
        """Expand tags to category keywords, keeping unmapped tags verbatim."""
        keywords: list[str] = []
        for tag in tags:
            keywords.extend(self.category_keywords(tag) or [tag.lower()])
        return keywords


def load_taxonomy(path: Optional[Path | str] = None) -> Taxonomy:
    """Load the keyword tables from a JSON file.

    Args:
        path: JSON file with ``categories``, ``moods`` and ``topics`` keys.
            Defaults to the bundled ``data/taxonomy.json``.

    Returns:
        A validated ``Taxonomy``.

    Raises:
        OSError: If the file cannot be read.
        pydantic.ValidationError: If the file does not match the schema.
    """
    path = Path(path) if path else DEFAULT_TAXONOMY_PATH
    taxonomy = Taxonomy.model_validate_json(path.read_text(encoding="utf-8"))
    logger.info(
        "Loaded taxonomy from %s: %d categories, %d moods, %d topics",
        path, len(taxonomy.categories), len(taxonomy.moods), len(taxonomy.topics),
    )
    return taxonomy
