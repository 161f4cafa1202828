"""Question service - tenant-scoped questions, replies and permalink reads.

The author's own message is modeled as the first reply of its question.
"""

import logging
from datetime import datetime
from typing import Iterator
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from squeak.core.exceptions import NotFoundError, PersistenceError
from squeak.core.structured_logging import build_log_context
from squeak.db.models import ProfileReadonly, Question, Reply, SqueakConfig
from squeak.schemas.question import (
    QuestionRead,
    QuestionThread,
    ReplyMetadata,
    ReplyProfileRead,
    ReplyView,
)
from squeak.services import config_service
from squeak.utils.slugs import slugify

logger = logging.getLogger(__name__)


# =============================================================================
# Writes
# =============================================================================

def create_question(
    db: Session,
    org_id: str,
    profile_id: UUID | None,
    subject: str | None,
    slug: str | None,
    published: bool,
    slack_timestamp: str | None = None,
    created_at: datetime | None = None,
) -> Question:
    """Add a question and assign its permalink (flushes, caller commits)."""
    question = Question(
        organization_id=org_id,
        profile_id=profile_id,
        subject=subject,
        slug=[slug] if slug else [],
        published=published,
        slack_timestamp=slack_timestamp,
    )
    if created_at is not None:
        question.created_at = created_at
    db.add(question)
    db.flush()

    question.permalink = _unique_permalink(db, org_id, question)
    db.flush()
    return question


def create_reply(
    db: Session,
    org_id: str,
    message_id: int,
    profile_id: UUID | None,
    body: str,
    published: bool = True,
    created_at: datetime | None = None,
) -> Reply:
    """Add a reply to a question (flushes, caller commits)."""
    reply = Reply(
        organization_id=org_id,
        message_id=message_id,
        profile_id=profile_id,
        body=body,
        published=published,
    )
    if created_at is not None:
        reply.created_at = created_at
    db.add(reply)
    db.flush()
    return reply


def create_question_with_reply(
    db: Session,
    config: SqueakConfig,
    profile_id: UUID,
    subject: str,
    slug: str | None,
    body: str,
) -> tuple[Question, Reply]:
    """
    Create a question and its opening reply in one transaction.

    The question is published per the tenant's auto-publish policy; the
    opening reply is always published.

    Raises:
        PersistenceError: Either write failed; nothing is committed
    """
    org_id = config.organization_id
    try:
        question = create_question(
            db,
            org_id=org_id,
            profile_id=profile_id,
            subject=subject,
            slug=slug,
            published=config.question_auto_publish,
        )
        reply = create_reply(
            db,
            org_id=org_id,
            message_id=question.id,
            profile_id=profile_id,
            body=body,
            published=True,
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(
            "Error creating question",
            extra=build_log_context(org_id=org_id, profile_id=str(profile_id)),
        )
        raise PersistenceError("Error creating message")

    return question, reply


def _permalink_candidates(base: str, question_id: int) -> Iterator[str]:
    yield base
    yield f"{base}-{question_id}"
    n = 2
    while True:
        yield f"{base}-{question_id}-{n}"
        n += 1


def _unique_permalink(db: Session, org_id: str, question: Question) -> str:
    """
    Slugified subject, suffixed with ``-<id>`` (then ``-<id>-<n>``) until no
    other question of the organization owns it.
    """
    base = slugify(question.subject)
    for candidate in _permalink_candidates(base, question.id):
        taken = db.execute(
            select(Question.id).where(
                Question.organization_id == org_id,
                Question.permalink == candidate,
                Question.id != question.id,
            )
        ).first()
        if not taken:
            return candidate


# =============================================================================
# Reads
# =============================================================================

def find_question(
    db: Session,
    org_id: str,
    *,
    permalink: str | None = None,
    question_id: int | str | None = None,
) -> Question | None:
    """
    Get a question by permalink when one is given, otherwise by id.

    Returns None when nothing matches in the organization.
    """
    query = select(Question).where(Question.organization_id == org_id)
    if permalink:
        query = query.where(Question.permalink == permalink)
    else:
        try:
            numeric_id = int(question_id)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        query = query.where(Question.id == numeric_id)
    return db.execute(query).scalar_one_or_none()


def list_replies_with_role(db: Session, question: Question) -> list[ReplyView]:
    """
    List a question's replies, oldest first, each with its author's role.

    The role is looked up in the reply's own organization.
    """
    rows = db.execute(
        select(Reply, ProfileReadonly.role)
        .options(joinedload(Reply.profile))
        .outerjoin(
            ProfileReadonly,
            and_(
                ProfileReadonly.profile_id == Reply.profile_id,
                ProfileReadonly.organization_id == Reply.organization_id,
            ),
        )
        .where(Reply.message_id == question.id)
        .order_by(Reply.created_at, Reply.id)
    ).all()

    return [to_reply_view(reply, role) for reply, role in rows]


def to_reply_view(reply: Reply, role: str | None) -> ReplyView:
    """Convert a Reply and its author's role to the read model."""
    profile = ReplyProfileRead.model_validate(reply.profile) if reply.profile else None
    return ReplyView(
        id=reply.id,
        body=reply.body,
        created_at=reply.created_at,
        published=reply.published,
        profile=profile,
        metadata=ReplyMetadata(role=role),
    )


def get_question_thread(
    db: Session,
    org_id: str,
    *,
    permalink: str | None = None,
    question_id: int | str | None = None,
) -> QuestionThread:
    """Question plus replies; an unknown question yields an empty thread."""
    question = find_question(db, org_id, permalink=permalink, question_id=question_id)
    if question is None:
        return QuestionThread(question=None, replies=[])
    return QuestionThread(
        question=QuestionRead.model_validate(question),
        replies=list_replies_with_role(db, question),
    )


def resolve_permalink(db: Session, org_id: str, raw_path: str) -> QuestionThread:
    """
    Resolve a widget page path like ``/questions/how-do-i-x``.

    The path must start with the organization's ``/{permalink_base}/``
    prefix; the rest is the question's permalink. A path outside the prefix
    is not found, even if its tail names a real question. A path inside the
    prefix that names no question returns an empty thread.

    Raises:
        ConfigMissingError: Organization has no config row
        NotFoundError: Path does not start with the permalink prefix
    """
    config = config_service.require_config(db, org_id)
    prefix = config_service.permalink_prefix(config)
    if not raw_path.startswith(prefix):
        raise NotFoundError("Question not found")

    key = raw_path[len(prefix):]
    if not key:
        return QuestionThread(question=None, replies=[])
    return get_question_thread(db, org_id, permalink=key)


def imported_slack_timestamps(db: Session, org_id: str, timestamps: list[str]) -> set[str]:
    """Subset of Slack timestamps that already back a question in the organization."""
    if not timestamps:
        return set()
    rows = db.execute(
        select(Question.slack_timestamp).where(
            Question.organization_id == org_id,
            Question.slack_timestamp.in_(timestamps),
        )
    ).scalars()
    return {ts for ts in rows if ts}
