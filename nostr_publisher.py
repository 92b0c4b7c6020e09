"""
Publish Nostr events to relays.

Relays are tried one after another, each through its own RelaySession.
A relay failing never stops the others; the run counts as published when
at least one relay accepted the event.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

import config
from relay_session import RelayError, RelaySession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishOutcome:
    """Result of publishing one event to one relay."""
    relay: str
    success: bool
    detail: str  # relay message on success, failure reason otherwise
    event_id: str

    @classmethod
    def succeeded(cls, relay: str, event_id: str, detail: str) -> "PublishOutcome":
        return cls(relay=relay, success=True, detail=detail, event_id=event_id)

    @classmethod
    def failed(cls, relay: str, event_id: str, reason: str) -> "PublishOutcome":
        return cls(relay=relay, success=False, detail=reason, event_id=event_id)

    def to_dict(self) -> dict:
        if self.success:
            return {"relay": self.relay, "status": "success", "message": self.detail}
        return {"relay": self.relay, "status": "failed", "error": self.detail}


@dataclass
class PublishSummary:
    event_id: str
    outcomes: List[PublishOutcome] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def total_count(self) -> int:
        return len(self.outcomes)

    @property
    def success(self) -> bool:
        return self.success_count > 0


def _publish_once(session: RelaySession, event: dict) -> str:
    session.connect()
    return session.publish(event)


def publish_to_relays(
    event: dict,
    relays: Iterable[str],
    connect_timeout: Optional[float] = None,
    publish_timeout: Optional[float] = None,
    pause_seconds: Optional[float] = None,
    session_factory: Callable[..., RelaySession] = RelaySession,
) -> PublishSummary:
    """
    Publish a signed event to each relay in order.
    Returns one outcome per relay; never raises for per-relay failures.
    """
    if pause_seconds is None:
        pause_seconds = config.RELAY_PAUSE_SECONDS
    summary = PublishSummary(event_id=event["id"])

    for i, relay_url in enumerate(relays):
        if i and pause_seconds > 0:
            time.sleep(pause_seconds)

        logger.info("Connecting to %s...", relay_url)
        session = None
        try:
            session = session_factory(
                relay_url,
                connect_timeout=connect_timeout,
                publish_timeout=publish_timeout,
            )
            detail = _publish_once(session, event)
        except RelayError as e:
            logger.warning("Failed to publish to %s: %s", relay_url, e)
            summary.outcomes.append(PublishOutcome.failed(relay_url, summary.event_id, str(e)))
        except Exception as e:
            logger.exception("Unexpected error publishing to %s", relay_url)
            summary.outcomes.append(
                PublishOutcome.failed(relay_url, summary.event_id, str(e) or e.__class__.__name__)
            )
        else:
            logger.info("Published to %s: %s", relay_url, detail)
            summary.outcomes.append(PublishOutcome.succeeded(relay_url, summary.event_id, detail))
        finally:
            if session is not None:
                try:
                    session.close()
                except Exception:
                    logger.debug("Ignoring close error for %s", relay_url, exc_info=True)

    logger.info("Published to %d/%d relays", summary.success_count, summary.total_count)
    return summary
