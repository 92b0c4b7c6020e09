#!/usr/bin/env python3
"""
Nostr posting bot

Flask application around the scheduled poster:
- /test    post the current slot's message now
- /status  bot identity and relay configuration
- /ping    relay connectivity check
- /health  liveness check
"""

import logging
import sys
from datetime import datetime, timezone

from flask import Flask, jsonify
from flask_cors import CORS

import config
from nostr_utils import load_private_key, public_key_hex
from post_scheduler import run_post_job
from relay_session import RelayError, RelaySession

logging.basicConfig(
    level=logging.DEBUG if config.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app, origins=config.CORS_ORIGINS, supports_credentials=True)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@app.route("/")
def index():
    return jsonify({
        "message": "Nostr Bot is running",
        "endpoints": {
            "/test": "Test posting functionality",
            "/status": "Check bot status",
            "/ping": "Test relay connection",
            "/health": "Health check",
        },
    })


@app.route("/test")
def test_post():
    """Run the posting job immediately."""
    try:
        result = run_post_job()
    except Exception as e:
        logger.exception("Error in posting job: %s", e)
        return jsonify({
            "success": False,
            "error": str(e),
            "timestamp": _now(),
        }), 500
    return jsonify(result)


@app.route("/status")
def status():
    public_key = "Not set"
    if config.NOSTR_PRIVATE_KEY:
        try:
            public_key = public_key_hex(load_private_key(config.NOSTR_PRIVATE_KEY))
        except ValueError as e:
            logger.warning("Configured private key is invalid: %s", e)
            public_key = "Invalid"
    return jsonify({
        "status": "running",
        "timestamp": _now(),
        "relays": config.NOSTR_RELAYS,
        "hasPrivateKey": bool(config.NOSTR_PRIVATE_KEY),
        "publicKey": public_key,
        "version": config.BOT_VERSION,
    })


@app.route("/ping")
def ping():
    """Open and close a connection to the ping relay."""
    relay_url = config.PING_RELAY
    try:
        with RelaySession(relay_url) as session:
            session.connect()
    except RelayError as e:
        return jsonify({
            "ping": "failed",
            "relay": relay_url,
            "error": str(e),
            "timestamp": _now(),
        }), 500
    return jsonify({
        "ping": "success",
        "relay": relay_url,
        "timestamp": _now(),
    })


@app.route("/health")
def health():
    return jsonify({
        "status": "healthy",
        "timestamp": _now(),
        "service": "nostr-bot",
    }), 200


if __name__ == "__main__":
    from post_scheduler import start_scheduler
    start_scheduler()
    app.run(host="0.0.0.0", port=config.PORT, debug=config.DEBUG, use_reloader=False)
