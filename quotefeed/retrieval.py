"""Quote retrieval over the shared quote cache.

Retrieval modes
───────────────
random    take from the front of the pool, then shuffle
category  keyword-ranked collection loop, drains matched quotes
mood      same loop over the mood table
topic     same loop over the topic table (category ids are aliases), with a
          fresh upstream fetch on every attempt
author    non-destructive author-name filter
tags      non-destructive keyword filter with a random fallback

Every mode degrades to a shorter (possibly empty) list when the upstream is
unavailable; none of them raise for network failure or unknown ids.
"""

from __future__ import annotations

import logging
import random
import re
from typing import Optional

from quotefeed.cache import QuoteCache
from quotefeed.models import RawQuote
from quotefeed.scorer import filter_by_keywords, score_by_relevance, shuffled
from quotefeed.taxonomy import Taxonomy

logger = logging.getLogger(__name__)

#: Extra quotes pooled beyond a random request so the take never empties the pool.
RANDOM_SAFETY_MARGIN = 10
#: Minimum pool size before a ranked or author pass.
POOL_SIZE = 50
#: Minimum pool size before a tag pass.
TAGS_POOL_SIZE = 100
#: Collection attempts per ranked retrieval.
MAX_ATTEMPTS = 6
#: Quotes collected per ranked retrieval (also the tag result cap).
TARGET_COUNT = 15
#: Tag matches below this fall back to a random batch.
MIN_TAG_MATCHES = 10
#: Pool size ensured before a single random quote.
SINGLE_QUOTE_POOL = 10
#: Default random batch size.
DEFAULT_BATCH = 20

_SLUG_SEPARATORS = re.compile(r"[-_]+")


class RetrievalService:
    """Public retrieval API over a ``QuoteCache``.

    Args:
        cache: The application's quote pool.
        taxonomy: Keyword tables for category/mood/topic lookup.
        rng: Random source for shuffling; tests pass a seeded instance.
    """

    def __init__(
        self,
        cache: QuoteCache,
        taxonomy: Taxonomy,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.cache = cache
        self.taxonomy = taxonomy
        self.rng = rng or random.Random()

    # ── Random ─────────────────────────────────────────────────────────────────

    async def fetch_random(self, count: int = DEFAULT_BATCH) -> list[RawQuote]:
        """Return up to *count* quotes in random order.

        Raises:
            ValueError: If *count* is negative.
        """
        if count < 0:
            raise ValueError("count must not be negative.")

        await self.cache.ensure_available(count + RANDOM_SAFETY_MARGIN)
        quotes = shuffled(self.cache.take(count), self.rng)
        logger.info("Random batch: %d/%d quotes", len(quotes), count)
        return quotes

    async def fetch_random_quote(self) -> Optional[RawQuote]:
        """Return a single quote from the front of the pool, or ``None``."""
        await self.cache.ensure_available(SINGLE_QUOTE_POOL)
        return self.cache.pop_first()

    # ── Ranked modes ───────────────────────────────────────────────────────────

    async def fetch_by_category(self, category_id: str) -> list[RawQuote]:
        keywords = self.taxonomy.category_keywords(category_id)
        if not keywords:
            logger.info("Unknown category %r", category_id)
            return []
        quotes = await self._collect(keywords, refill_every_attempt=False)
        logger.info("Category %r: %d quotes", category_id, len(quotes))
        return quotes

    async def fetch_by_mood(self, mood_id: str) -> list[RawQuote]:
        keywords = self.taxonomy.mood_keywords(mood_id)
        if not keywords:
            logger.info("Unknown mood %r", mood_id)
            return []
        quotes = await self._collect(keywords, refill_every_attempt=False)
        logger.info("Mood %r: %d quotes", mood_id, len(quotes))
        return quotes

    async def fetch_by_topic(self, topic_id: str) -> list[RawQuote]:
        """Topic retrieval; ids that name a category are served as categories."""
        table, keywords = self.taxonomy.resolve_topic(topic_id)
        if table == "category":
            return await self.fetch_by_category(topic_id)
        if not keywords:
            logger.info("Unknown topic %r", topic_id)
            return []
        quotes = await self._collect(keywords, refill_every_attempt=True)
        logger.info("Topic %r: %d quotes", topic_id, len(quotes))
        return quotes

    async def _collect(
        self,
        keywords: list[str],
        *,
        refill_every_attempt: bool,
    ) -> list[RawQuote]:
        """Greedy ranked collection loop shared by the category/mood/topic modes.

        Each attempt tops up the pool, ranks the pooled quotes and drains the
        best matches out of the pool until ``TARGET_COUNT`` are collected.

        With ``refill_every_attempt`` (topic mode) every attempt starts with
        one upstream fetch. Otherwise the pool is topped up to ``POOL_SIZE``
        and a single extra fetch is forced only after an attempt that matched
        nothing; the loop ends if that fetch brings nothing new.
        """
        collected: list[RawQuote] = []

        for attempt in range(MAX_ATTEMPTS):
            if len(collected) >= TARGET_COUNT:
                break

            if refill_every_attempt:
                await self.cache.refill()
            else:
                await self.cache.ensure_available(POOL_SIZE)

            scored = score_by_relevance(self.cache.snapshot(), keywords)
            for item in scored:
                if len(collected) >= TARGET_COUNT:
                    break
                collected.append(item.quote)
                self.cache.remove(item.quote)

            logger.debug(
                "Attempt %d: %d scored, %d collected",
                attempt + 1, len(scored), len(collected),
            )

            if not scored and not refill_every_attempt:
                if await self.cache.refill() == 0:
                    break

        return shuffled(collected, self.rng)

    # ── Filter modes ───────────────────────────────────────────────────────────

    async def fetch_by_author(self, author_slug: str) -> list[RawQuote]:
        """Return pooled quotes whose author contains the slug's name.

        ``"marcus-aurelius"`` matches "Marcus Aurelius". Matches stay pooled.
        """
        await self.cache.ensure_available(POOL_SIZE)
        name = _SLUG_SEPARATORS.sub(" ", author_slug).strip().lower()
        if not name:
            return []
        matches = [q for q in self.cache.snapshot() if name in q.author.lower()]
        logger.info("Author %r: %d quotes", author_slug, len(matches))
        return shuffled(matches, self.rng)

    async def fetch_by_tags(self, tags: list[str]) -> list[RawQuote]:
        """Return up to 15 pooled quotes matching any tag keyword.

        Each tag expands to its category keyword list, or to itself when it
        names no category. Fewer than 10 matches fall back to a random batch
        of 15. Matches stay pooled.
        """
        keywords = self.taxonomy.tag_keywords(tags)
        await self.cache.ensure_available(TAGS_POOL_SIZE)
        matches = filter_by_keywords(self.cache.snapshot(), keywords)

        if len(matches) >= MIN_TAG_MATCHES:
            logger.info("Tags %s: %d matches", tags, len(matches))
            return shuffled(matches, self.rng)[:TARGET_COUNT]

        logger.info("Tags %s: only %d matches, falling back to random", tags, len(matches))
        return await self.fetch_random(TARGET_COUNT)
