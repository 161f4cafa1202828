"""Slack history import - turns channel threads into questions and replies."""

import logging
from datetime import datetime, timezone

import anyio
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from squeak.core.exceptions import ConfigMissingError, PersistenceError
from squeak.core.structured_logging import build_log_context
from squeak.db.models import Question, SqueakConfig
from squeak.schemas.slack_import import SlackReplyItem, SlackThread
from squeak.services import question_service
from squeak.services.slack_service import SlackClient, message_body
from squeak.utils.sanitize import sanitize_text

logger = logging.getLogger(__name__)

IGNORED_SUBTYPES = {"channel_join"}
DEFAULT_SUBJECT = "No subject"


def require_slack_settings(config: SqueakConfig) -> tuple[str, str]:
    """
    Raises:
        ConfigMissingError: Slack token or question channel not configured
    """
    if not config.slack_api_key or not config.slack_question_channel:
        raise ConfigMissingError("Slack is not configured")
    return config.slack_api_key, config.slack_question_channel


def slack_ts_to_datetime(ts: str) -> datetime:
    return datetime.fromtimestamp(float(ts), tz=timezone.utc)


async def list_importable_threads(
    db: Session,
    org_id: str,
    client: SlackClient,
    channel: str,
) -> list[SlackThread]:
    """
    Channel threads not yet imported into the organization.

    Join notices and messages whose timestamp already backs a question are skipped.
    """
    messages = [
        m for m in await client.conversations_history(channel)
        if m.get("subtype") not in IGNORED_SUBTYPES and m.get("ts")
    ]
    # Session work stays off the event loop
    already = await anyio.to_thread.run_sync(
        question_service.imported_slack_timestamps, db, org_id, [m["ts"] for m in messages]
    )

    threads: list[SlackThread] = []
    for message in messages:
        ts = message["ts"]
        if ts in already:
            continue
        reply_count = message.get("reply_count") or None
        replies = None
        if reply_count and reply_count >= 1:
            replies = [
                SlackReplyItem(ts=reply["ts"], body=message_body(reply))
                for reply in await client.conversations_replies(channel, ts)
            ]
        threads.append(
            SlackThread(
                ts=ts,
                reply_count=reply_count,
                client_msg_id=message.get("client_msg_id"),
                body=message_body(message),
                replies=replies,
            )
        )
    return threads


def import_thread(db: Session, org_id: str, thread: SlackThread) -> Question:
    """
    Create one question (and its replies) from a Slack thread, atomically.

    A thread is published only when the admin gave it both a subject and a slug.

    Raises:
        PersistenceError: Nothing from this thread was committed
    """
    subject = thread.subject.strip()
    slug = thread.slug.strip()
    try:
        question = question_service.create_question(
            db,
            org_id=org_id,
            profile_id=None,
            subject=subject or DEFAULT_SUBJECT,
            slug=slug or None,
            published=bool(subject and slug),
            slack_timestamp=thread.ts,
            created_at=slack_ts_to_datetime(thread.ts),
        )
        if thread.reply_count and thread.replies:
            for reply in thread.replies:
                question_service.create_reply(
                    db,
                    org_id=org_id,
                    message_id=question.id,
                    profile_id=None,
                    body=sanitize_text(reply.body),
                    created_at=slack_ts_to_datetime(reply.ts),
                )
        else:
            question_service.create_reply(
                db,
                org_id=org_id,
                message_id=question.id,
                profile_id=None,
                body=sanitize_text(thread.body),
                created_at=slack_ts_to_datetime(thread.ts),
            )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error importing Slack thread", extra=build_log_context(org_id=org_id))
        raise PersistenceError("Error importing Slack thread")
    return question


def import_threads(
    db: Session, org_id: str, threads: list[SlackThread]
) -> tuple[list[Question], list[str]]:
    """
    Import threads in order; returns (created questions, skipped timestamps).

    Threads already imported are skipped, so repeating an import is harmless.
    """
    already = question_service.imported_slack_timestamps(db, org_id, [t.ts for t in threads])
    created: list[Question] = []
    skipped: list[str] = []
    for thread in threads:
        if thread.ts in already:
            skipped.append(thread.ts)
            continue
        created.append(import_thread(db, org_id, thread))
        already.add(thread.ts)
    logger.info(
        "Imported %d Slack threads (%d skipped)",
        len(created),
        len(skipped),
        extra=build_log_context(org_id=org_id),
    )
    return created, skipped
