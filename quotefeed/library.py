"""
Favorites and user-authored quotes.

Both collections are listed newest first and feed the ``_favorites`` /
``_myquotes`` entries of a mix.
"""

from __future__ import annotations

import logging
import random
import time
from datetime import datetime

from quotefeed.models import DisplayQuote, FavoriteQuote, UserQuote
from quotefeed.storage import connect, utcnow

logger = logging.getLogger(__name__)

DEFAULT_USER_AUTHOR = "Me"


# ── Favorites ──────────────────────────────────────────────────────────────────


def add_favorite(quote: DisplayQuote) -> bool:
    """Save *quote* to favorites.

    Returns:
        True if added, False if it was already a favorite.
    """
    with connect() as conn:
        cursor = conn.execute(
            "INSERT OR IGNORE INTO favorites (quote_id, text, author, category, saved_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (quote.id, quote.text, quote.author, quote.category, utcnow()),
        )
    added = cursor.rowcount > 0
    if added:
        logger.info("Saved favorite quote_id=%r", quote.id)
    return added


def remove_favorite(quote_id: str) -> bool:
    """Remove a favorite; False if it was not saved."""
    with connect() as conn:
        cursor = conn.execute("DELETE FROM favorites WHERE quote_id = ?", (quote_id,))
    return cursor.rowcount > 0


def is_favorite(quote_id: str) -> bool:
    with connect() as conn:
        row = conn.execute(
            "SELECT 1 FROM favorites WHERE quote_id = ?", (quote_id,)
        ).fetchone()
    return row is not None


def toggle_favorite(quote: DisplayQuote) -> bool:
    """Flip the favorite state of *quote* and return the new state."""
    if remove_favorite(quote.id):
        return False
    add_favorite(quote)
    return True


def get_favorites() -> list[FavoriteQuote]:
    """Return all favorites, newest first. Corrupt rows are skipped."""
    with connect() as conn:
        rows = conn.execute(
            "SELECT id, quote_id, text, author, category, saved_at FROM favorites "
            "ORDER BY id DESC"
        ).fetchall()

    favorites: list[FavoriteQuote] = []
    for row in rows:
        try:
            favorites.append(
                FavoriteQuote(
                    id=row["quote_id"],
                    text=row["text"],
                    author=row["author"],
                    category=row["category"],
                    saved_at=datetime.fromisoformat(row["saved_at"]),
                )
            )
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping corrupt favorite id=%d: %s", row["id"], exc)
    return favorites


def clear_favorites() -> int:
    with connect() as conn:
        cursor = conn.execute("DELETE FROM favorites")
    return cursor.rowcount


# ── User quotes ────────────────────────────────────────────────────────────────


def _user_quote_id() -> str:
    return f"user-{int(time.time() * 1000)}-{random.getrandbits(40):010x}"


def add_user_quote(text: str, author: str = DEFAULT_USER_AUTHOR) -> UserQuote:
    """Store a quote written by the user.

    Args:
        text: The quote text.
        author: Attribution; defaults to ``"Me"``.

    Returns:
        The stored ``UserQuote``.

    Raises:
        ValueError: If *text* is blank.
    """
    text = text.strip()
    if not text:
        raise ValueError("Quote text must not be empty.")
    author = author.strip() or DEFAULT_USER_AUTHOR

    quote_id = _user_quote_id()
    created_at = utcnow()
    with connect() as conn:
        conn.execute(
            "INSERT INTO user_quotes (quote_id, text, author, created_at) "
            "VALUES (?, ?, ?, ?)",
            (quote_id, text, author, created_at),
        )

    logger.info("Added user quote id=%r", quote_id)
    return UserQuote(
        id=quote_id,
        text=text,
        author=author,
        created_at=datetime.fromisoformat(created_at),
    )


def edit_user_quote(quote_id: str, text: str, author: str) -> bool:
    """Replace the text and author of a user quote.

    Raises:
        ValueError: If *text* is blank.
    """
    text = text.strip()
    if not text:
        raise ValueError("Quote text must not be empty.")
    with connect() as conn:
        cursor = conn.execute(
            "UPDATE user_quotes SET text = ?, author = ? WHERE quote_id = ?",
            (text, author.strip() or DEFAULT_USER_AUTHOR, quote_id),
        )
    return cursor.rowcount > 0


def remove_user_quote(quote_id: str) -> bool:
    with connect() as conn:
        cursor = conn.execute("DELETE FROM user_quotes WHERE quote_id = ?", (quote_id,))
    return cursor.rowcount > 0


def get_user_quotes() -> list[UserQuote]:
    """Return all user quotes, newest first. Corrupt rows are skipped."""
    with connect() as conn:
        rows = conn.execute(
            "SELECT id, quote_id, text, author, created_at FROM user_quotes "
            "ORDER BY id DESC"
        ).fetchall()

    quotes: list[UserQuote] = []
    for row in rows:
        try:
            quotes.append(
                UserQuote(
                    id=row["quote_id"],
                    text=row["text"],
                    author=row["author"],
                    created_at=datetime.fromisoformat(row["created_at"]),
                )
            )
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping corrupt user quote id=%d: %s", row["id"], exc)
    return quotes
