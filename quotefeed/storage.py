"""
SQLite storage for the local quote collections.

Schema
──────
table: history
  id         INTEGER PRIMARY KEY AUTOINCREMENT  (insertion order, newest = max)
  quote_id   TEXT NOT NULL UNIQUE
  text       TEXT NOT NULL
  author     TEXT NOT NULL
  category   TEXT NOT NULL
  viewed_at  TEXT NOT NULL  (ISO-8601 UTC)

table: favorites
  id         INTEGER PRIMARY KEY AUTOINCREMENT
  quote_id   TEXT NOT NULL UNIQUE
  text, author, category
  saved_at   TEXT NOT NULL  (ISO-8601 UTC)

table: user_quotes
  id         INTEGER PRIMARY KEY AUTOINCREMENT
  quote_id   TEXT NOT NULL UNIQUE
  text, author
  created_at TEXT NOT NULL  (ISO-8601 UTC)
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path(__file__).parent.parent / "data" / "quotefeed.db"

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS history (
        id         INTEGER PRIMARY KEY AUTOINCREMENT,
        quote_id   TEXT NOT NULL UNIQUE,
        text       TEXT NOT NULL,
        author     TEXT NOT NULL,
        category   TEXT NOT NULL,
        viewed_at  TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS favorites (
        id         INTEGER PRIMARY KEY AUTOINCREMENT,
        quote_id   TEXT NOT NULL UNIQUE,
        text       TEXT NOT NULL,
        author     TEXT NOT NULL,
        category   TEXT NOT NULL,
        saved_at   TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_quotes (
        id         INTEGER PRIMARY KEY AUTOINCREMENT,
        quote_id   TEXT NOT NULL UNIQUE,
        text       TEXT NOT NULL,
        author     TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
)


def db_path() -> Path:
    """Return the database file path, honouring a DB_PATH env var if set."""
    env = os.getenv("DB_PATH")
    return Path(env) if env else DEFAULT_DB_PATH


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@contextmanager
def connect():
    """Yield a connected sqlite3.Connection, creating the file/dir if needed."""
    path = db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db() -> None:
    """Create the history, favorites and user_quotes tables if missing."""
    with connect() as conn:
        for statement in _SCHEMA:
            conn.execute(statement)
    logger.info("Quote DB initialised at %s", db_path())
