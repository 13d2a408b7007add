"""In-memory quote pool backed by the upstream source.

Responsibilities:
- Hold not-yet-dispensed ``RawQuote`` records in FIFO order
- Refill from the upstream source on demand
- Remember every quote text seen since start-up so the same text is never
  pooled twice, even when upstream batches overlap

One ``QuoteCache`` is created at application start and handed to the
retrieval service. The seen-text set lives as long as the instance and is not
persisted.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator
from typing import Optional

from quotefeed.models import RawQuote
from quotefeed.upstream import QuoteSource

logger = logging.getLogger(__name__)


class QuoteCache:
    """FIFO pool of upstream quotes with cross-fetch de-duplication."""

    def __init__(self, source: QuoteSource) -> None:
        self.source = source
        self._quotes: deque[RawQuote] = deque()
        self._seen_texts: set[str] = set()

    def __len__(self) -> int:
        return len(self._quotes)

    def __iter__(self) -> Iterator[RawQuote]:
        return iter(self.snapshot())

    def snapshot(self) -> list[RawQuote]:
        """Return the pooled quotes in FIFO order without removing them."""
        return list(self._quotes)

    # ── Refilling ──────────────────────────────────────────────────────────────

    async def refill(self) -> int:
        """Fetch one upstream batch and pool the quotes not seen before.

        Returns:
            Number of quotes added. ``0`` when the fetch failed or the whole
            batch was already seen.
        """
        batch = await self.source.fetch()

        added = 0
        for quote in batch:
            if quote.text in self._seen_texts:
                continue
            self._seen_texts.add(quote.text)
            self._quotes.append(quote)
            added += 1

        logger.debug(
            "Refill: %d fetched, %d new, pool size %d",
            len(batch), added, len(self._quotes),
        )
        return added

    async def ensure_available(self, min_count: int) -> None:
        """Refill until at least *min_count* quotes are pooled.

        Stops early as soon as a refill contributes nothing new, so an
        exhausted or failing upstream cannot spin forever.
        """
        while len(self._quotes) < min_count:
            if await self.refill() == 0:
                logger.info(
                    "Upstream exhausted at %d/%d pooled quotes",
                    len(self._quotes), min_count,
                )
                break

    # ── Dispensing ─────────────────────────────────────────────────────────────

    def take(self, count: int) -> list[RawQuote]:
        """Remove and return up to *count* quotes from the front of the pool.

        Never refills; returns fewer quotes when the pool is short.
        """
        taken: list[RawQuote] = []
        while self._quotes and len(taken) < count:
            taken.append(self._quotes.popleft())
        return taken

    def pop_first(self) -> Optional[RawQuote]:
        """Remove and return the front quote, or ``None`` when empty."""
        return self._quotes.popleft() if self._quotes else None

    def remove(self, quote: RawQuote) -> bool:
        """Remove *quote* (matched by identity) from the pool.

        Returns:
            True if the quote was pooled and has been removed.
        """
        for index, pooled in enumerate(self._quotes):
            if pooled is quote:
                del self._quotes[index]
                return True
        return False
