"""Application settings — all configuration loaded from environment variables.

Usage:
    from config.settings import Settings
    settings = Settings()
    settings.validate()   # raises ValueError if QUOTES_API_URL is missing
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional


def _parse_timeout(raw: str) -> Optional[float]:
    """Seconds from ``raw``; ``None`` when blank. Raises ``ValueError`` otherwise."""
    raw = raw.strip()
    if not raw:
        return None
    try:
        seconds = float(raw)
    except ValueError:
        raise ValueError(f"QUOTES_API_TIMEOUT must be a number of seconds, got {raw!r}.") from None
    if seconds <= 0:
        raise ValueError("QUOTES_API_TIMEOUT must be a positive number of seconds.")
    return seconds


@dataclass
class Settings:
    """Centralised application configuration.

    All values are read from environment variables at instantiation time
    so that tests can override them by patching ``os.environ``.
    """

    # ── Upstream ────────────────────────────────────────────────────────────
    #: Full URL of the quotes endpoint (returns a JSON array of quotes).
    quotes_api_url: str = field(
        default_factory=lambda: os.environ.get("QUOTES_API_URL", "")
    )
    #: Raw request timeout in seconds; unset means no timeout.
    request_timeout_raw: str = field(
        default_factory=lambda: os.environ.get("QUOTES_API_TIMEOUT", "")
    )

    # ── Taxonomy ────────────────────────────────────────────────────────────
    #: Alternative keyword tables; empty uses the bundled taxonomy.json.
    taxonomy_path: str = field(
        default_factory=lambda: os.environ.get("TAXONOMY_PATH", "")
    )

    # ── Flask ───────────────────────────────────────────────────────────────
    debug: bool = field(
        default_factory=lambda: os.environ.get("FLASK_DEBUG", "0") == "1"
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("PORT", "5001"))
    )

    def validate(self) -> None:
        """Raise ``ValueError`` if any required setting is missing or invalid."""
        if not self.quotes_api_url:
            raise ValueError(
                "QUOTES_API_URL environment variable is not set. "
                "Copy .env.example to .env and set the quotes endpoint."
            )
        _parse_timeout(self.request_timeout_raw)

    @property
    def request_timeout(self) -> Optional[float]:
        """Parsed timeout; an invalid value (reported by ``validate``) means none."""
        try:
            return _parse_timeout(self.request_timeout_raw)
        except ValueError:
            return None
