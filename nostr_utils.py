"""
Nostr utilities for the posting bot.

- Private key loading (hex or nsec) and generation
- Kind 1 text note templates
- Event signing (id and signature come from nostr.event.Event)
"""

import logging
import re
import time
from typing import Optional

from nostr.event import Event
from nostr.key import PrivateKey

logger = logging.getLogger(__name__)

TEXT_NOTE_KIND = 1
_HEX_KEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def load_private_key(secret: str) -> PrivateKey:
    """
    Build a PrivateKey from a 64-char hex string or an nsec1 bech32 string.
    Raises ValueError for anything else.
    """
    secret = (secret or "").strip()
    if secret.startswith("nsec1"):
        try:
            return PrivateKey.from_nsec(secret)
        except Exception as e:
            raise ValueError(f"Invalid nsec private key: {e}") from e
    if not _HEX_KEY_RE.match(secret):
        raise ValueError("Private key must be 64 hex characters or an nsec1 string")
    return PrivateKey(raw_secret=bytes.fromhex(secret))


def generate_private_key() -> PrivateKey:
    return PrivateKey()


def resolve_private_key(secret: Optional[str]) -> PrivateKey:
    """Configured key if set, otherwise a throwaway key for this run."""
    if secret:
        return load_private_key(secret)
    logger.warning("Using generated private key. Set NOSTR_PRIVATE_KEY for persistent identity.")
    return generate_private_key()


def public_key_hex(private_key: PrivateKey) -> str:
    return private_key.public_key.hex()


def build_note_template(content: str, created_at: Optional[int] = None) -> dict:
    """Unsigned Kind 1 text note."""
    if not isinstance(content, str):
        raise TypeError("Note content must be a string")
    return {
        "kind": TEXT_NOTE_KIND,
        "created_at": int(time.time()) if created_at is None else int(created_at),
        "tags": [],
        "content": content,
    }


def sign_event(template: dict, private_key: PrivateKey) -> dict:
    """
    Sign an event template {kind, created_at, tags, content}.
    Returns the serialized event dict with id, pubkey and sig filled in.
    """
    kind = template["kind"]
    tags = [list(t) for t in template.get("tags", [])]
    ev = Event(
        content=template["content"],
        public_key=private_key.public_key.hex(),
        kind=kind,
        tags=tags,
        created_at=template["created_at"],
    )
    private_key.sign_event(ev)
    return {
        "id": ev.id,
        "pubkey": ev.public_key,
        "created_at": ev.created_at,
        "kind": kind,
        "tags": tags,
        "content": ev.content,
        "sig": ev.signature,
    }
