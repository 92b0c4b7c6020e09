"""
Configuration for the Nostr posting bot.

Set via environment variables or .env file.
"""

import os

# Base
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
PORT = int(os.getenv("PORT", "8080"))
BOT_VERSION = "1.2.0"

# CORS - allowed origins for the status endpoints (comma-separated)
_DEFAULT_CORS = "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173,http://127.0.0.1:3000"
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", _DEFAULT_CORS).split(",")
    if origin.strip()
]

# Nostr - Bot identity (hex or nsec). Empty means a throwaway key per run.
# Generate with: python generate_keys.py
NOSTR_PRIVATE_KEY = os.getenv("NOSTR_PRIVATE_KEY", "").strip()

# Relays the scheduled note is published to, in order
NOSTR_RELAYS = [
    r.strip()
    for r in os.getenv("NOSTR_RELAYS", "wss://relay.damus.io,wss://nos.lol").split(",")
    if r.strip()
]

# Relay used by the /ping connectivity check
PING_RELAY = os.getenv("PING_RELAY", "wss://relay.damus.io").strip()

# Relay session limits (seconds)
RELAY_CONNECT_TIMEOUT = float(os.getenv("RELAY_CONNECT_TIMEOUT", "10"))
RELAY_PUBLISH_TIMEOUT = float(os.getenv("RELAY_PUBLISH_TIMEOUT", "5"))
RELAY_PAUSE_SECONDS = float(os.getenv("RELAY_PAUSE_SECONDS", "0.1"))  # between relays, 0 disables

# Set to false only for relays with self-signed certificates
RELAY_VERIFY_SSL = os.getenv("RELAY_VERIFY_SSL", "true").lower() == "true"

# Posting
DEFAULT_MESSAGE = os.getenv("DEFAULT_MESSAGE", "Hello from Nostr bot!")
SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"
