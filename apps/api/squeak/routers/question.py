"""Question router - widget endpoints to read and ask questions."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.orm import Session

from squeak.core.deps import get_db, get_optional_user, get_question_notifier
from squeak.core.exceptions import AuthenticationError, MissingParamsError, SqueakError
from squeak.core.rate_limit import QUESTION_LIMIT, limiter
from squeak.core.security import UserIdentity
from squeak.core.structured_logging import build_log_context
from squeak.schemas.question import QuestionCreate, QuestionCreateResponse, QuestionThread
from squeak.services import config_service, profile_service, question_service
from squeak.services.notification_service import (
    QuestionNotifier,
    build_question_alert,
    dispatch_question_alert,
)
from squeak.utils.sanitize import sanitize_text

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/question", response_model=QuestionThread)
def get_question(
    organization_id: str | None = Query(None, alias="organizationId"),
    permalink: str | None = Query(None),
    db: Session = Depends(get_db),
):
    """
    Resolve a widget page path to its question and replies.

    404 when the path is outside the organization's permalink prefix; an
    unknown question inside the prefix returns ``{question: null, replies: []}``.
    """
    if not organization_id or not permalink:
        raise MissingParamsError()
    return question_service.resolve_permalink(db, organization_id, permalink)


@router.post("/question", response_model=QuestionCreateResponse, status_code=201)
@limiter.limit(QUESTION_LIMIT)
def create_question(
    request: Request,
    data: QuestionCreate,
    background_tasks: BackgroundTasks,
    user: UserIdentity | None = Depends(get_optional_user),
    notifier: QuestionNotifier = Depends(get_question_notifier),
    db: Session = Depends(get_db),
):
    """
    Ask a question from the widget.

    Creates the question and the author's opening reply together. The Slack
    alert goes out after the response and cannot fail the request.
    """
    org_id = data.organization_id
    body = sanitize_text(data.body)
    subject = sanitize_text(data.subject)

    if user is None:
        raise AuthenticationError()

    context = build_log_context(org_id=org_id, user_id=user.id, route="/api/question", method="POST")
    try:
        profile = profile_service.require_user_profile(db, org_id, user)
        config = config_service.require_config(db, org_id)
    except SqueakError as e:
        logger.error("[Question] %s", e.message, extra=context)
        raise

    question, _reply = question_service.create_question_with_reply(
        db,
        config=config,
        profile_id=profile.id,
        subject=subject,
        slug=data.slug,
        body=body,
    )

    alert = build_question_alert(config, question, body, data.slug, profile.id)
    background_tasks.add_task(dispatch_question_alert, notifier, alert)

    return QuestionCreateResponse(
        message_id=question.id,
        profile_id=profile.id,
        subject=subject,
        body=body,
        slug=question.slug,
        published=question.published,
        permalink=question.permalink,
    )
