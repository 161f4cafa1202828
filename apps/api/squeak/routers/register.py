"""Register router - creates a widget user's profile in an organization."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from squeak.core.deps import get_db, get_session_resolver
from squeak.core.exceptions import AuthenticationError, NotFoundError, ValidationError
from squeak.core.rate_limit import REGISTER_LIMIT, limiter
from squeak.core.security import SessionResolver
from squeak.core.structured_logging import build_log_context
from squeak.schemas.profile import RegisterRequest, RegisterResponse
from squeak.services import org_service, profile_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=RegisterResponse)
@limiter.limit(REGISTER_LIMIT)
def register(
    request: Request,
    data: RegisterRequest,
    resolver: SessionResolver = Depends(get_session_resolver),
    db: Session = Depends(get_db),
):
    """Called by the widget after sign-up, with the new user's access token."""
    if not data.organization_id or not data.token:
        raise ValidationError("Missing required fields")

    user = resolver.validate_token(data.token)
    if user is None:
        logger.error("[Register] Error fetching user from token")
        raise AuthenticationError("Invalid token")

    if org_service.get_org_by_id(db, data.organization_id) is None:
        raise NotFoundError("Organization not found")

    profile = profile_service.register_profile(
        db,
        org_id=data.organization_id,
        user=user,
        first_name=data.first_name,
        last_name=data.last_name,
        avatar=data.avatar,
    )
    logger.info(
        "[Register] Created profile",
        extra=build_log_context(org_id=data.organization_id, user_id=user.id, profile_id=str(profile.id)),
    )

    return RegisterResponse(
        user_id=user.id,
        profile_id=profile.id,
        first_name=data.first_name,
        last_name=data.last_name,
        avatar=data.avatar,
        organization_id=data.organization_id,
    )
