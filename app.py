# app.py
# -------------------------------
# Flask application entry point and CLI commands.
# It uses the app-factory pattern.
#
# Why this file exists and what it does:
#   - Creates and configures the Flask app (via create_app).
#   - Owns the shared objects: SofaScore client, push subscription registry
#     and notification dispatcher (stored on app.extensions).
#   - Relays SofaScore endpoints (/live, /lineups, /player, /player-image).
#   - Registers browser push subscriptions and broadcasts notifications.
#   - Turns every failure into a small JSON error envelope; no tracebacks
#     ever reach the client.
# -------------------------------

from __future__ import annotations
import json
import logging
from typing import Any, Callable, Mapping, Optional

import click
from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import validate_config
from models import NotificationPayload
from player_stats import find_player_stats
from providers.sofascore import SofaScoreClient, UpstreamError, UpstreamTransportError
from push.dispatcher import NotificationDispatcher
from push.registry import InvalidSubscriptionError, SubscriptionRegistry

logger = logging.getLogger(__name__)

IMAGE_CACHE_CONTROL = "public, max-age=86400"


# ---------- App Factory ----------

def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """
    Create and configure the Flask app:
      - Loads configuration from config.Config, then applies `overrides`
      - Refuses to start without VAPID keys (ConfigurationError)
      - Builds the SofaScore client, push registry and dispatcher
      - Registers routes, error handlers and CLI commands
    """
    app = Flask(__name__)
    app.config.from_object("config.Config")
    if overrides:
        app.config.update(overrides)
    validate_config(app.config)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    CORS(app)

    registry = SubscriptionRegistry()
    app.extensions["sofascore"] = SofaScoreClient(
        api_base=app.config["SOFASCORE_API_BASE"],
        image_base=app.config["SOFASCORE_IMAGE_BASE"],
        sport=app.config["SOFASCORE_SPORT"],
        timeout=app.config["UPSTREAM_TIMEOUT"],
    )
    app.extensions["push_registry"] = registry
    app.extensions["push_dispatcher"] = NotificationDispatcher(
        registry,
        vapid_private_key=app.config["VAPID_PRIVATE_KEY"],
        vapid_subject=app.config["VAPID_SUBJECT"],
        ttl=app.config["PUSH_TTL"],
    )

    # Looked up per request so tests can swap the client on a live app.
    def sofascore() -> SofaScoreClient:
        return app.extensions["sofascore"]

    def relay_json(fetch: Callable[[], Any], unavailable_message: str):
        """Return upstream JSON verbatim, or the matching error envelope."""
        try:
            data = fetch()
        except UpstreamTransportError as e:
            logger.warning("SofaScore unreachable: %s", e)
            return jsonify(error="internal error"), 500
        except UpstreamError as e:
            logger.warning("SofaScore returned HTTP %s", e.status_code)
            return jsonify(error=unavailable_message), e.status_code
        return jsonify(data)

    # ----- Routes -----

    @app.route("/")
    def health():
        """Liveness probe."""
        return Response("Backend SofaScore OK", mimetype="text/plain")

    @app.route("/live")
    def live_events():
        return relay_json(sofascore().get_live_events, "SofaScore blocked")

    @app.route("/lineups/<int:event_id>")
    def lineups(event_id: int):
        return relay_json(lambda: sofascore().get_lineups(event_id), "Lineups unavailable")

    @app.route("/player/<int:event_id>/<player_name>")
    def player_stats(event_id: int, player_name: str):
        """Stats for one player of one match, matched by (partial) name."""
        try:
            data = sofascore().get_lineups(event_id)
        except UpstreamTransportError as e:
            logger.warning("SofaScore unreachable: %s", e)
            return jsonify(error="internal error"), 500
        except UpstreamError as e:
            logger.warning("Lineups for event %s: HTTP %s", event_id, e.status_code)
            return jsonify(error="Stats unavailable"), e.status_code

        record = find_player_stats(data, player_name)
        if record is None:
            return jsonify(error="Player not found"), 404
        return jsonify(record.to_dict())

    @app.route("/player-image/<int:player_id>")
    def player_image(player_id: int):
        """Proxy a player portrait. Errors come back with an empty body."""
        try:
            image = sofascore().get_player_image(player_id)
        except UpstreamTransportError as e:
            logger.warning("Image fetch for player %s failed: %s", player_id, e)
            return Response(status=500)
        except UpstreamError as e:
            logger.info("No image for player %s (HTTP %s)", player_id, e.status_code)
            return Response(status=404)
        return Response(
            image,
            mimetype="image/jpeg",
            headers={"Cache-Control": IMAGE_CACHE_CONTROL},
        )

    @app.route("/push/vapid-public-key")
    def push_public_key():
        """Browsers need this to call pushManager.subscribe()."""
        return jsonify(publicKey=app.config["VAPID_PUBLIC_KEY"])

    @app.route("/push/subscribe", methods=["POST"])
    def push_subscribe():
        data = request.get_json(silent=True)
        try:
            app.extensions["push_registry"].register(data)
        except InvalidSubscriptionError as e:
            logger.info("Rejected push subscription: %s", e)
            return jsonify(error="Invalid subscription"), 400
        return jsonify(success=True), 201

    @app.route("/push/send", methods=["POST"])
    def push_send():
        data = request.get_json(silent=True)
        payload = NotificationPayload.from_request(
            data if isinstance(data, dict) else None,
            default_title=app.config["PUSH_DEFAULT_TITLE"],
            default_body=app.config["PUSH_DEFAULT_BODY"],
        )
        result = app.extensions["push_dispatcher"].broadcast(payload)
        return jsonify(result.to_dict())

    # ----- Error Handlers -----

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        return jsonify(error=e.name), e.code

    @app.errorhandler(Exception)
    def unhandled_error(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify(error="internal error"), 500

    # ----- CLI Commands -----

    @app.cli.command("live-events")
    def live_events_cmd():
        """
        Fetch live events from SofaScore and print how many there are.
        Usage:
            flask live-events
        """
        try:
            data = sofascore().get_live_events()
        except UpstreamError as e:
            click.echo(f"❌ SofaScore request failed: {e}")
            return
        events = data.get("events", []) if isinstance(data, dict) else []
        click.echo(f"✅ {len(events)} live event(s).")

    @app.cli.command("player-stats")
    @click.option("--event", "event_id", required=True, type=int, help="SofaScore event ID")
    @click.option("--name", "player_name", required=True, help="Player name (partial, accents optional)")
    def player_stats_cmd(event_id: int, player_name: str):
        """
        Print the normalized stats record for one player as JSON.
        Usage:
            flask player-stats --event 12345678 --name "joao"
        """
        try:
            data = sofascore().get_lineups(event_id)
        except UpstreamError as e:
            click.echo(f"❌ Lineups unavailable for event {event_id}: {e}")
            return
        record = find_player_stats(data, player_name)
        if record is None:
            click.echo(f"❌ Player '{player_name}' not found in event {event_id}.")
            return
        click.echo(json.dumps(record.to_dict(), ensure_ascii=False, indent=2))

    return app


# ---------- Dev Server ----------

if __name__ == "__main__":
    app = create_app()
    logger.info("Backend running on port %s", app.config["PORT"])
    # Threaded so concurrent requests share the one in-memory registry.
    app.run(host="0.0.0.0", port=app.config["PORT"], debug=False, threaded=True)
