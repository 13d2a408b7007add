"""Mix composition: one feed from several categories and local collections.

A mix selection is a list of category ids. Ids starting with ``_`` are never
sent to the API, and two of them pull from local collections:

- ``_favorites``  the user's saved quotes
- ``_myquotes``   quotes the user wrote

Category results are fetched concurrently and interleaved round-robin so no
single category dominates the front of the feed; local quotes are appended
after them and the whole feed is shuffled.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable, Sequence
from typing import Optional, TypeVar

from quotefeed.models import FavoriteQuote, RawQuote, UserQuote, local_to_raw
from quotefeed.retrieval import DEFAULT_BATCH, RetrievalService
from quotefeed.scorer import shuffled
from quotefeed.taxonomy import FAVORITES_ID, LOCAL_ID_PREFIX, MY_QUOTES_ID

logger = logging.getLogger(__name__)

T = TypeVar("T")


def interleave(lists: Sequence[Sequence[T]]) -> list[T]:
    """Round-robin merge: index 0 of every list, then index 1, and so on.

    Examples:
        >>> interleave([["a1", "a2", "a3"], ["b1"]])
        ['a1', 'b1', 'a2', 'a3']
    """
    longest = max((len(items) for items in lists), default=0)
    merged: list[T] = []
    for index in range(longest):
        for items in lists:
            if index < len(items):
                merged.append(items[index])
    return merged


class MixComposer:
    """Builds mixed feeds on top of a ``RetrievalService``.

    Args:
        service: Retrieval service used for real categories and fallbacks.
        favorites: Returns the current favorites collection.
        user_quotes: Returns the current user-authored collection.
        rng: Random source for the final shuffle.
    """

    def __init__(
        self,
        service: RetrievalService,
        favorites: Optional[Callable[[], Sequence[FavoriteQuote]]] = None,
        user_quotes: Optional[Callable[[], Sequence[UserQuote]]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.service = service
        self._favorites = favorites or (lambda: [])
        self._user_quotes = user_quotes or (lambda: [])
        self.rng = rng or random.Random()

    def local_quotes(self, selection: Sequence[str]) -> list[RawQuote]:
        """Convert the selected local collections to ``RawQuote`` form."""
        quotes: list[RawQuote] = []
        if FAVORITES_ID in selection:
            quotes.extend(local_to_raw(f) for f in self._favorites())
        if MY_QUOTES_ID in selection:
            quotes.extend(local_to_raw(q) for q in self._user_quotes())
        return quotes

    async def compose(self, selection: Sequence[str]) -> list[RawQuote]:
        """Build the feed for a mix selection.

        Args:
            selection: Category ids, possibly including the reserved ids.

        Returns:
            The shuffled mixed feed. An empty selection, or one that yields
            nothing, returns a random batch of 20 instead.
        """
        selection = list(dict.fromkeys(selection))
        if not selection:
            return await self.service.fetch_random(DEFAULT_BATCH)

        categories = [c for c in selection if not c.startswith(LOCAL_ID_PREFIX)]
        local = self.local_quotes(selection)

        per_category: list[list[RawQuote]] = []
        if categories:
            per_category = list(
                await asyncio.gather(
                    *(self.service.fetch_by_category(c) for c in categories)
                )
            )

        combined = interleave(per_category) + local
        logger.info(
            "Mix %s: %d category quotes, %d local quotes",
            selection, len(combined) - len(local), len(local),
        )

        if not combined:
            logger.info("Mix %s produced nothing, falling back to random", selection)
            return await self.service.fetch_random(DEFAULT_BATCH)

        return shuffled(combined, self.rng)
