"""
Viewed-quote history.

Most recent first, capped at ``MAX_HISTORY`` entries. Viewing a quote that is
already in the history moves it to the top instead of adding a second row.
"""

from __future__ import annotations

import logging
from datetime import datetime

from quotefeed.models import DisplayQuote, HistoryEntry
from quotefeed.storage import connect, utcnow

logger = logging.getLogger(__name__)

MAX_HISTORY = 100


def add(quote: DisplayQuote) -> int:
    """Record *quote* as viewed now and return its new row ID.

    Args:
        quote: The quote that became current on screen.

    Returns:
        The integer primary key of the inserted row.
    """
    with connect() as conn:
        conn.execute("DELETE FROM history WHERE quote_id = ?", (quote.id,))
        cursor = conn.execute(
            "INSERT INTO history (quote_id, text, author, category, viewed_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (quote.id, quote.text, quote.author, quote.category, utcnow()),
        )
        row_id = cursor.lastrowid
        conn.execute(
            "DELETE FROM history WHERE id NOT IN "
            "(SELECT id FROM history ORDER BY id DESC LIMIT ?)",
            (MAX_HISTORY,),
        )

    logger.debug("History add id=%d quote_id=%r", row_id, quote.id)
    return row_id


def get_all(limit: int = MAX_HISTORY) -> list[HistoryEntry]:
    """Return the most recent *limit* history entries (newest first)."""
    with connect() as conn:
        rows = conn.execute(
            "SELECT id, quote_id, text, author, category, viewed_at FROM history "
            "ORDER BY id DESC LIMIT ?",
            (limit,),
        ).fetchall()

    entries: list[HistoryEntry] = []
    for row in rows:
        try:
            entries.append(
                HistoryEntry(
                    id=row["quote_id"],
                    text=row["text"],
                    author=row["author"],
                    category=row["category"],
                    viewed_at=datetime.fromisoformat(row["viewed_at"]),
                )
            )
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping corrupt history entry id=%d: %s", row["id"], exc)

    return entries


def clear() -> int:
    """Delete every history entry and return how many were removed."""
    with connect() as conn:
        cursor = conn.execute("DELETE FROM history")
    logger.info("Cleared %d history entries", cursor.rowcount)
    return cursor.rowcount
