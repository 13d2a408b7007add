"""
Pydantic models shared across the quotefeed core.
"""

from __future__ import annotations

import random
import time
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

#: Placeholder category stamped on every converted quote.
DEFAULT_CATEGORY = "inspiration"

#: Prefix for identifiers synthesised when the upstream record has none.
FALLBACK_ID_PREFIX = "zen-"


class RawQuote(BaseModel):
    """A quote record as received from the upstream source.

    The wire format names its fields ``_id``, ``content`` and ``authorSlug``;
    they are exposed here as ``id``, ``text`` and ``author_slug``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(default="", alias="_id")
    text: str = Field(alias="content")
    author: str = ""
    tags: list[str] = Field(default_factory=list)
    author_slug: str = Field(default="", alias="authorSlug")
    length: int = 0


class DisplayQuote(BaseModel):
    """Application-facing quote shape."""

    id: str
    text: str
    author: str
    category: str = DEFAULT_CATEGORY


class FavoriteQuote(BaseModel):
    """A quote the user saved to favorites."""

    id: str
    text: str
    author: str
    category: str = DEFAULT_CATEGORY
    saved_at: datetime


class UserQuote(BaseModel):
    """A quote written by the user."""

    id: str
    text: str
    author: str
    created_at: datetime


class HistoryEntry(BaseModel):
    """A quote the user has viewed, stored in SQLite."""

    id: str
    text: str
    author: str
    category: str = DEFAULT_CATEGORY
    viewed_at: datetime


def _fallback_id() -> str:
    return f"{FALLBACK_ID_PREFIX}{int(time.time() * 1000)}-{random.getrandbits(32):08x}"


def convert_quote(raw: RawQuote) -> DisplayQuote:
    """Convert an upstream ``RawQuote`` into a ``DisplayQuote``.

    Args:
        raw: The upstream record.

    Returns:
        A ``DisplayQuote`` with the same text and author. When the upstream
        id is empty a ``zen-<ms>-<hex>`` identifier is generated instead.

    Examples:
        >>> convert_quote(RawQuote(id="q1", text="Be bold.", author="Anon")).id
        'q1'
    """
    return DisplayQuote(
        id=raw.id or _fallback_id(),
        text=raw.text,
        author=raw.author,
    )


def local_to_raw(quote: FavoriteQuote | UserQuote) -> RawQuote:
    """Wrap a locally held favorite or user quote in the upstream shape."""
    return RawQuote(
        id=quote.id,
        text=quote.text,
        author=quote.author,
        tags=[],
        author_slug="",
        length=len(quote.text),
    )
