"""Slack import router - admin endpoints to pull channel history into questions."""

from typing import Callable

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from squeak.core.async_utils import run_async
from squeak.core.deps import get_db, get_slack_client_factory, require_user
from squeak.core.exceptions import SqueakError
from squeak.core.security import UserIdentity
from squeak.schemas.slack_import import SlackImportRequest, SlackImportResponse, SlackThread
from squeak.services import config_service, profile_service, slack_import_service
from squeak.services.slack_service import SlackApiError, SlackClient

router = APIRouter(prefix="/slack")


class SlackUnavailableError(SqueakError):
    status_code = 502
    default_message = "Error fetching Slack messages"


@router.get("/messages", response_model=list[SlackThread])
def list_messages(
    organization_id: str = Query(..., alias="organizationId", min_length=1),
    user: UserIdentity = Depends(require_user),
    slack_client_factory: Callable[[str], SlackClient] = Depends(get_slack_client_factory),
    db: Session = Depends(get_db),
):
    """Threads in the organization's Slack question channel not imported yet."""
    profile_service.require_org_admin(db, organization_id, user)
    config = config_service.require_config(db, organization_id)
    token, channel = slack_import_service.require_slack_settings(config)

    try:
        return run_async(
            slack_import_service.list_importable_threads(
                db, organization_id, slack_client_factory(token), channel
            )
        )
    except SlackApiError as e:
        raise SlackUnavailableError(f"Error fetching Slack messages ({e.error})")


@router.post("/import", response_model=SlackImportResponse)
def import_messages(
    data: SlackImportRequest,
    user: UserIdentity = Depends(require_user),
    db: Session = Depends(get_db),
):
    """Import the threads the admin selected (with the subject/slug they typed)."""
    profile_service.require_org_admin(db, data.organization_id, user)
    created, skipped = slack_import_service.import_threads(db, data.organization_id, data.messages)
    return SlackImportResponse(imported=[q.id for q in created], skipped=skipped)
