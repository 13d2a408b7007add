"""
Flask web server for quotefeed.

Routes
──────
GET    /api/quotes/random?count=N        Random batch (default 20)
GET    /api/quotes/category/<id>         Keyword-ranked category quotes
GET    /api/quotes/mood/<id>             Keyword-ranked mood quotes
GET    /api/quotes/topic/<id>            Keyword-ranked topic quotes
GET    /api/quotes/author/<slug>         Quotes by author
GET    /api/quotes/tags?tag=a&tag=b      Quotes matching tags (random fallback)
GET    /api/mix?category=a&category=b    Mixed feed (``_favorites`` / ``_myquotes`` allowed)
GET    /api/taxonomy                     Known category / mood / topic ids
GET    /api/history                      Viewed quotes, newest first
POST   /api/history                      Record a viewed quote
DELETE /api/history                      Clear history
GET    /api/favorites                    Favorites, newest first
POST   /api/favorites                    Save a favorite
DELETE /api/favorites/<id>               Remove a favorite
GET    /api/my-quotes                    User quotes, newest first
POST   /api/my-quotes                    Add a user quote
PUT    /api/my-quotes/<id>               Edit a user quote
DELETE /api/my-quotes/<id>               Delete a user quote

Run with ``python web/app.py`` or ``flask --app web.app run``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from pydantic import ValidationError

# Allow running as `python web/app.py` from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

load_dotenv()

from config.settings import Settings
from quotefeed import history as hist
from quotefeed import library, storage
from quotefeed.cache import QuoteCache
from quotefeed.mix import MixComposer
from quotefeed.models import DisplayQuote, RawQuote, convert_quote
from quotefeed.retrieval import DEFAULT_BATCH, RetrievalService
from quotefeed.taxonomy import load_taxonomy
from quotefeed.upstream import HttpQuoteSource

logger = logging.getLogger(__name__)


def _quotes_json(quotes: list[RawQuote]):
    return jsonify([convert_quote(q).model_dump() for q in quotes])


def build_service(settings: Settings) -> RetrievalService:
    """Wire the upstream source, cache and taxonomy into a retrieval service."""
    source = HttpQuoteSource(settings.quotes_api_url, timeout=settings.request_timeout)
    taxonomy = load_taxonomy(settings.taxonomy_path or None)
    return RetrievalService(QuoteCache(source), taxonomy)


def create_app(service: Optional[RetrievalService] = None) -> Flask:
    """Build the Flask app.

    Args:
        service: Pre-built retrieval service (tests inject one over a fake
            source). Built from ``Settings`` when omitted.
    """
    if service is None:
        settings = Settings()
        try:
            settings.validate()
        except ValueError as exc:
            logger.warning("Invalid configuration: %s", exc)
        service = build_service(settings)

    composer = MixComposer(
        service,
        favorites=library.get_favorites,
        user_quotes=library.get_user_quotes,
    )

    # Initialise the SQLite database on startup
    storage.init_db()

    app = Flask(__name__)

    # ── Retrieval API ──────────────────────────────────────────────────────

    @app.route("/api/quotes/random")
    async def random_quotes():
        """Return a random batch; ``count`` defaults to 20."""
        try:
            count = int(request.args.get("count", DEFAULT_BATCH))
            quotes = await service.fetch_random(count)
        except ValueError:
            return jsonify({"error": "count must be a non-negative integer"}), 400
        return _quotes_json(quotes)

    @app.route("/api/quotes/category/<category_id>")
    async def category_quotes(category_id: str):
        return _quotes_json(await service.fetch_by_category(category_id))

    @app.route("/api/quotes/mood/<mood_id>")
    async def mood_quotes(mood_id: str):
        return _quotes_json(await service.fetch_by_mood(mood_id))

    @app.route("/api/quotes/topic/<topic_id>")
    async def topic_quotes(topic_id: str):
        return _quotes_json(await service.fetch_by_topic(topic_id))

    @app.route("/api/quotes/author/<author_slug>")
    async def author_quotes(author_slug: str):
        return _quotes_json(await service.fetch_by_author(author_slug))

    @app.route("/api/quotes/tags")
    async def tag_quotes():
        tags = [t for t in request.args.getlist("tag") if t.strip()]
        return _quotes_json(await service.fetch_by_tags(tags))

    @app.route("/api/mix")
    async def mix_quotes():
        selection = [c for c in request.args.getlist("category") if c.strip()]
        return _quotes_json(await composer.compose(selection))

    @app.route("/api/taxonomy")
    def taxonomy_ids():
        taxonomy = service.taxonomy
        return jsonify(
            {
                "categories": sorted(taxonomy.categories),
                "moods": sorted(taxonomy.moods),
                "topics": sorted(taxonomy.topics),
            }
        )

    # ── History API ────────────────────────────────────────────────────────

    @app.route("/api/history")
    def list_history():
        """Return viewed quotes, newest first."""
        return jsonify([e.model_dump(mode="json") for e in hist.get_all()])

    @app.route("/api/history", methods=["POST"])
    def add_history():
        try:
            quote = DisplayQuote.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify({"id": hist.add(quote)}), 201

    @app.route("/api/history", methods=["DELETE"])
    def clear_history():
        return jsonify({"deleted": hist.clear()})

    # ── Favorites API ──────────────────────────────────────────────────────

    @app.route("/api/favorites")
    def list_favorites():
        return jsonify([f.model_dump(mode="json") for f in library.get_favorites()])

    @app.route("/api/favorites", methods=["POST"])
    def add_favorite():
        try:
            quote = DisplayQuote.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            return jsonify({"error": str(exc)}), 400
        added = library.add_favorite(quote)
        return jsonify({"added": added}), 201 if added else 200

    @app.route("/api/favorites/<quote_id>", methods=["DELETE"])
    def remove_favorite(quote_id: str):
        if not library.remove_favorite(quote_id):
            return jsonify({"error": "Not found"}), 404
        return jsonify({"deleted": quote_id})

    # ── User quotes API ────────────────────────────────────────────────────

    @app.route("/api/my-quotes")
    def list_user_quotes():
        return jsonify([q.model_dump(mode="json") for q in library.get_user_quotes()])

    @app.route("/api/my-quotes", methods=["POST"])
    def add_user_quote():
        body = request.get_json(silent=True) or {}
        try:
            quote = library.add_user_quote(
                str(body.get("text", "")),
                str(body.get("author", library.DEFAULT_USER_AUTHOR)),
            )
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify(quote.model_dump(mode="json")), 201

    @app.route("/api/my-quotes/<quote_id>", methods=["PUT"])
    def edit_user_quote(quote_id: str):
        body = request.get_json(silent=True) or {}
        try:
            updated = library.edit_user_quote(
                quote_id,
                str(body.get("text", "")),
                str(body.get("author", library.DEFAULT_USER_AUTHOR)),
            )
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        if not updated:
            return jsonify({"error": "Not found"}), 404
        return jsonify({"updated": quote_id})

    @app.route("/api/my-quotes/<quote_id>", methods=["DELETE"])
    def delete_user_quote(quote_id: str):
        if not library.remove_user_quote(quote_id):
            return jsonify({"error": "Not found"}), 404
        return jsonify({"deleted": quote_id})

    return app


# ── Entry point ────────────────────────────────────────────────────────────

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    settings = Settings()
    create_app().run(debug=settings.debug, host="0.0.0.0", port=settings.port)
