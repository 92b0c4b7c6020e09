"""
Post scheduler: signs the note for the current time slot and publishes it
to the configured relays, on a daily UTC cron per message slot.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

from nostr.key import PrivateKey

import config
from message_selector import schedule_slots, select_message
from nostr_publisher import PublishSummary, publish_to_relays
from nostr_utils import build_note_template, resolve_private_key, sign_event

logger = logging.getLogger(__name__)


def run_post_job(
    scheduled_at: Optional[datetime] = None,
    relays: Optional[List[str]] = None,
    private_key: Optional[PrivateKey] = None,
    publish: Callable[..., PublishSummary] = publish_to_relays,
) -> dict:
    """
    Single run: pick the message, sign it, publish to every relay.
    Returns dict with success, eventId, content, counts and per-relay results.
    Key or signing errors are raised to the caller.
    """
    if scheduled_at is None:
        scheduled_at = datetime.now(timezone.utc)
    if relays is None:
        relays = list(config.NOSTR_RELAYS)
    if private_key is None:
        private_key = resolve_private_key(config.NOSTR_PRIVATE_KEY)

    content = select_message(scheduled_at)
    logger.info("Posting message for %s: %s", scheduled_at.strftime("%H:%M"), content)
    logger.info("Using relays: %s", relays)

    event = sign_event(build_note_template(content, created_at=int(time.time())), private_key)
    logger.info("Event created with ID: %s", event["id"])

    summary = publish(event, relays)
    return {
        "success": summary.success,
        "message": f"Event published to {summary.success_count}/{summary.total_count} relays",
        "eventId": event["id"],
        "content": content,
        "successCount": summary.success_count,
        "totalCount": summary.total_count,
        "publishResults": [o.to_dict() for o in summary.outcomes],
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def run_scheduled_slot(hour: int, minute: int) -> None:
    """APScheduler job for one message slot."""
    slot = datetime.now(timezone.utc).replace(hour=hour, minute=minute, second=0, microsecond=0)
    logger.info("Scheduled post triggered for %02d:%02d UTC", hour, minute)
    try:
        result = run_post_job(scheduled_at=slot)
    except Exception:
        logger.exception("Scheduled post failed for %02d:%02d UTC", hour, minute)
        return
    if not result["success"]:
        logger.warning("Scheduled post reached no relays: %s", result["publishResults"])


def schedule_post_jobs(scheduler) -> List[str]:
    """Register one daily cron job per message slot. Returns the job ids."""
    job_ids = []
    for hour, minute in schedule_slots():
        job_id = f"post_{hour:02d}_{minute:02d}"
        scheduler.add_job(
            run_scheduled_slot,
            "cron",
            hour=hour,
            minute=minute,
            timezone="UTC",
            args=[hour, minute],
            id=job_id,
            replace_existing=True,
        )
        job_ids.append(job_id)
    logger.info("Post jobs scheduled: %s", ", ".join(job_ids))
    return job_ids


def start_scheduler() -> Optional[object]:
    """
    Start APScheduler with the daily post jobs.
    Returns scheduler instance or None if disabled.
    """
    if not config.SCHEDULER_ENABLED:
        logger.info("Post scheduler disabled (SCHEDULER_ENABLED=false)")
        return None

    from apscheduler.schedulers.background import BackgroundScheduler

    sched = BackgroundScheduler(timezone="UTC")
    schedule_post_jobs(sched)
    sched.start()
    logger.info("Post scheduler started")
    return sched
