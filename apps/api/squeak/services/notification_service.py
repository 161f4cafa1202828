"""New-question alerts.

Alerts are dispatched after the HTTP response has been sent. Delivery is
best-effort and at-most-once: a failed alert is logged and dropped, and it
never changes the outcome of the request that created the question.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

import httpx

from squeak.core.exceptions import DispatchError
from squeak.core.structured_logging import build_log_context
from squeak.db.models import Question, SqueakConfig
from squeak.services.slack_service import SlackApiError, SlackClient

logger = logging.getLogger(__name__)

MAX_PREVIEW_CHARS = 500


@dataclass(frozen=True)
class QuestionAlert:
    """Everything a channel needs to announce a new question.

    Built inside the request so dispatch never touches the request's DB session.
    """

    organization_id: str
    question_id: int
    subject: str
    body: str
    slug: str | None
    author_profile_id: UUID
    question_url: str | None = None
    slack_api_key: str | None = None
    slack_channel: str | None = None


class QuestionNotifier(Protocol):
    async def notify(self, alert: QuestionAlert) -> None: ...


def build_question_alert(
    config: SqueakConfig,
    question: Question,
    body: str,
    slug: str | None,
    author_profile_id: UUID,
) -> QuestionAlert:
    question_url = None
    if config.company_domain and question.permalink:
        domain = config.company_domain.rstrip("/")
        if not domain.startswith(("http://", "https://")):
            domain = f"https://{domain}"
        question_url = f"{domain}/{config.permalink_base}/{question.permalink}"

    return QuestionAlert(
        organization_id=config.organization_id,
        question_id=question.id,
        subject=question.subject or "",
        body=body,
        slug=slug,
        author_profile_id=author_profile_id,
        question_url=question_url,
        slack_api_key=config.slack_api_key,
        slack_channel=config.slack_question_channel,
    )


class SlackQuestionNotifier:
    """Posts new questions to the organization's Slack question channel."""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str | None = None):
        self.http_client = http_client
        self.base_url = base_url

    async def notify(self, alert: QuestionAlert) -> None:
        if not alert.slack_api_key or not alert.slack_channel:
            logger.debug(
                "Slack alerts not configured",
                extra=build_log_context(org_id=alert.organization_id),
            )
            return

        client = SlackClient(
            token=alert.slack_api_key, http_client=self.http_client, base_url=self.base_url
        )
        text, blocks = _render_alert(alert)
        try:
            await client.post_message(alert.slack_channel, text=text, blocks=blocks)
        except (SlackApiError, httpx.HTTPError) as e:
            raise DispatchError(f"Slack alert failed ({type(e).__name__})") from e


def _render_alert(alert: QuestionAlert) -> tuple[str, list[dict]]:
    preview = alert.body
    if len(preview) > MAX_PREVIEW_CHARS:
        preview = preview[:MAX_PREVIEW_CHARS].rstrip() + "..."

    title = f"*New question:* {alert.subject}" if alert.subject else "*New question*"
    if alert.question_url:
        title = f"{title}\n<{alert.question_url}|View question>"

    blocks = [
        {"type": "section", "text": {"type": "mrkdwn", "text": title}},
        {"type": "section", "text": {"type": "mrkdwn", "text": preview or " "}},
    ]
    if alert.slug:
        blocks.append(
            {
                "type": "context",
                "elements": [{"type": "mrkdwn", "text": f"Asked on `{alert.slug}`"}],
            }
        )
    return f"New question: {alert.subject}", blocks


async def dispatch_question_alert(notifier: QuestionNotifier, alert: QuestionAlert) -> None:
    """Deliver one alert; failures are logged and dropped."""
    context = build_log_context(org_id=alert.organization_id, question_id=alert.question_id)
    try:
        await notifier.notify(alert)
    except Exception:
        logger.exception("Question alert dispatch failed", extra=context)
        return
    logger.info("Question alert dispatched", extra=context)
