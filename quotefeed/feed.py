"""Feed buffer controller: paging and prefetch for one swipe session.

State machine
─────────────
    IDLE ──load()──▶ LOADING ──▶ READY ──advance() past end──▶ LOADING ──▶ READY

While READY, ``advance()`` walks a cursor through the buffer. When three or
fewer quotes remain ahead of the cursor, a background prefetch appends ten
random quotes to the tail. Only one prefetch is in flight at a time.

Every fetch is stamped with the context generation current when it was
issued. ``load()`` bumps the generation, so a fetch that resolves after the
user switched category/mood/mix is discarded instead of leaking stale quotes
into the new buffer.

``retreat()`` replays from a short-term stack of shown quotes and never
fetches. It is independent of the persisted history store, which only hears
about quotes surfaced by ``load()`` and ``advance()``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from quotefeed.mix import MixComposer
from quotefeed.models import DisplayQuote, RawQuote, convert_quote
from quotefeed.retrieval import DEFAULT_BATCH, RetrievalService

logger = logging.getLogger(__name__)

#: Quotes left ahead of the cursor that trigger a prefetch.
PREFETCH_THRESHOLD = 3
#: Random quotes appended per prefetch.
PREFETCH_SIZE = 10


class FeedMode(str, Enum):
    """What the feed is currently showing."""

    RANDOM = "random"
    MOOD = "mood"
    CATEGORY = "category"
    TOPIC = "topic"
    MIX = "mix"


class FeedState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class FeedContext:
    """Filter context for a feed session.

    ``target`` is the mood/category/topic id; ``selection`` the mix ids.
    """

    mode: FeedMode = FeedMode.RANDOM
    target: Optional[str] = None
    selection: tuple[str, ...] = ()


class FeedController:
    """Buffers quotes for one screen and hides fetch latency from swipes.

    Args:
        service: Retrieval service for every mode and for prefetches.
        composer: Mix composer; mix mode falls back to random without one.
        on_view: Called with each quote the first time it becomes current
            (e.g. ``quotefeed.history.add``).
    """

    def __init__(
        self,
        service: RetrievalService,
        composer: Optional[MixComposer] = None,
        on_view: Optional[Callable[[DisplayQuote], object]] = None,
    ) -> None:
        self.service = service
        self.composer = composer
        self.on_view = on_view

        self.context = FeedContext()
        self.state = FeedState.IDLE

        self._buffer: list[RawQuote] = []
        self._cursor = 0
        self._replay: list[DisplayQuote] = []
        self._replay_index = -1

        self._generation = 0
        self._prefetching = False
        self._prefetch_task: Optional[asyncio.Task] = None

    # ── Read-only views ────────────────────────────────────────────────────────

    @property
    def buffer(self) -> list[RawQuote]:
        return list(self._buffer)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def remaining(self) -> int:
        """Quotes from the cursor to the end of the buffer."""
        return len(self._buffer) - self._cursor

    @property
    def current(self) -> Optional[DisplayQuote]:
        """The quote on screen, including one replayed by ``retreat()``."""
        if 0 <= self._replay_index < len(self._replay):
            return self._replay[self._replay_index]
        return None

    @property
    def prefetching(self) -> bool:
        return self._prefetching

    # ── Loading ────────────────────────────────────────────────────────────────

    async def load(self, context: Optional[FeedContext] = None) -> Optional[DisplayQuote]:
        """Enter a (new) filter context and fetch the initial batch.

        Discards the current buffer and replay stack. Returns the first quote,
        or ``None`` when nothing could be fetched.
        """
        if context is not None:
            self.context = context
        self._generation += 1
        generation = self._generation

        self._buffer = []
        self._cursor = 0
        self._replay = []
        self._replay_index = -1
        self.state = FeedState.LOADING

        quotes = await self._fetch_for_context()
        if generation != self._generation:
            logger.debug("Discarding initial batch for superseded context %s", self.context)
            return None

        self._buffer = list(quotes)
        self.state = FeedState.READY
        logger.info("Feed loaded: mode=%s quotes=%d", self.context.mode.value, len(quotes))

        if not self._buffer:
            return None
        return self._show(self._buffer[0])

    async def _fetch_for_context(self) -> list[RawQuote]:
        context = self.context
        if context.mode is FeedMode.MOOD and context.target:
            return await self.service.fetch_by_mood(context.target)
        if context.mode is FeedMode.CATEGORY and context.target:
            return await self.service.fetch_by_category(context.target)
        if context.mode is FeedMode.TOPIC and context.target:
            return await self.service.fetch_by_topic(context.target)
        if context.mode is FeedMode.MIX and self.composer is not None:
            return await self.composer.compose(context.selection)
        return await self.service.fetch_random(DEFAULT_BATCH)

    # ── Navigation ─────────────────────────────────────────────────────────────

    async def advance(self) -> Optional[DisplayQuote]:
        """Move to the next quote.

        Schedules a background prefetch when the buffer runs low and reloads
        through the active mode when the cursor runs past the end.

        Returns:
            The new current quote, or ``None`` if the reload came back empty
            or was superseded by a context switch.
        """
        # Before anything is shown the cursor already points at the next quote.
        next_index = self._cursor + 1 if self._replay else self._cursor

        if len(self._buffer) - next_index <= PREFETCH_THRESHOLD:
            self._schedule_prefetch()

        if next_index >= len(self._buffer):
            generation = self._generation
            self.state = FeedState.LOADING
            more = await self._fetch_for_context()
            if generation != self._generation:
                logger.debug("Discarding reload for superseded context")
                return None
            self.state = FeedState.READY
            if not more:
                return None
            # Show the reload's first quote even if a prefetch landed meanwhile.
            next_index = len(self._buffer)
            self._buffer.extend(more)

        self._cursor = next_index
        return self._show(self._buffer[next_index])

    def retreat(self) -> Optional[DisplayQuote]:
        """Step back through the shown quotes; ``None`` at the start."""
        if self._replay_index - 1 < 0:
            return None
        self._replay_index -= 1
        return self._replay[self._replay_index]

    def _show(self, quote: RawQuote) -> DisplayQuote:
        display = convert_quote(quote)
        # Advancing after a retreat drops the replay entries ahead of us.
        del self._replay[self._replay_index + 1:]
        self._replay.append(display)
        self._replay_index = len(self._replay) - 1

        if self.on_view is not None:
            self.on_view(display)
        return display

    # ── Prefetch ───────────────────────────────────────────────────────────────

    def _schedule_prefetch(self) -> None:
        if self._prefetching:
            return
        self._prefetching = True
        self._prefetch_task = asyncio.create_task(self._prefetch(self._generation))

    async def _prefetch(self, generation: int) -> None:
        try:
            more = await self.service.fetch_random(PREFETCH_SIZE)
            if generation != self._generation:
                logger.debug("Discarding %d prefetched quotes for old context", len(more))
                return
            self._buffer.extend(more)
            logger.debug("Prefetched %d quotes, buffer size %d", len(more), len(self._buffer))
        finally:
            self._prefetching = False

    async def wait_prefetch(self) -> None:
        """Wait for the in-flight prefetch, if any, to finish."""
        if self._prefetch_task is not None:
            await self._prefetch_task
