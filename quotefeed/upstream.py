"""Upstream quote source.

The upstream is a single HTTP GET endpoint returning a JSON array of quote
records. Every call is expected to return a fresh random slice; no paging
parameters are sent.

A failed fetch (transport error, non-2xx status, body that is not a JSON
array) is logged and reported as an empty batch. Nothing here raises to the
caller.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx
from pydantic import ValidationError

from quotefeed.models import RawQuote

logger = logging.getLogger(__name__)


class QuoteSource(Protocol):
    """Anything that can hand out a batch of raw quotes."""

    async def fetch(self) -> list[RawQuote]: ...


def parse_batch(payload: object) -> list[RawQuote]:
    """Validate a decoded JSON payload into ``RawQuote`` objects.

    Malformed records are skipped with a warning; a payload that is not a
    list yields ``[]``.
    """
    if not isinstance(payload, list):
        logger.warning("Quote API returned %s, expected a list", type(payload).__name__)
        return []

    quotes: list[RawQuote] = []
    for index, item in enumerate(payload):
        try:
            quotes.append(RawQuote.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping malformed quote record #%d: %s", index, exc)
    return quotes


class HttpQuoteSource:
    """Fetches quote batches from the configured HTTP endpoint.

    A new ``httpx.AsyncClient`` is opened per call so the source can be used
    from whichever event loop the caller runs on.
    """

    def __init__(
        self,
        url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialise the source.

        Args:
            url: Full URL of the quotes endpoint.
            timeout: Request timeout in seconds; ``None`` waits indefinitely.
            transport: Optional transport override (tests use
                ``httpx.MockTransport``).
        """
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def fetch(self) -> list[RawQuote]:
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport
        ) as client:
            try:
                response = await client.get(self.url)
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                logger.error("Quote API request failed: %s", exc)
                return []

        if not response.is_success:
            logger.warning("Quote API error: status %d", response.status_code)
            return []

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("Quote API returned invalid JSON: %s", exc)
            return []

        quotes = parse_batch(payload)
        logger.debug("Fetched %d quotes from %s", len(quotes), self.url)
        return quotes
