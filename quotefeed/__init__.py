"""
quotefeed core package.

Modules
───────
models     — Pydantic data models (RawQuote, DisplayQuote, FavoriteQuote, UserQuote, HistoryEntry)
taxonomy   — Category / mood / topic keyword tables loaded from data/taxonomy.json
upstream   — httpx client for the upstream quotes endpoint
cache      — FIFO quote pool with cross-fetch de-duplication
scorer     — Keyword relevance scoring and filtering
retrieval  — Random, category, mood, topic, author and tag retrieval
mix        — Round-robin mix composition across categories and local collections
feed       — Buffered swipe feed with background prefetch
storage    — SQLite connection helper and schema
history    — Viewed-quote history (add, get_all, clear)
library    — Favorites and user-authored quotes
"""
