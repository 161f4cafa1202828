"""Profile service - tenant-scoped profiles for authenticated widget users."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from squeak.core.exceptions import AuthorizationError, ConflictError, PersistenceError
from squeak.core.security import UserIdentity
from squeak.db.enums import DEFAULT_PROFILE_ROLE, ROLES_CAN_ADMINISTER, ProfileRole
from squeak.db.models import Profile, ProfileReadonly

logger = logging.getLogger(__name__)


def get_profile_link(db: Session, org_id: str, user_id: str) -> ProfileReadonly | None:
    """Get the readonly profile row linking an auth user to an organization."""
    return db.execute(
        select(ProfileReadonly).where(
            ProfileReadonly.organization_id == org_id,
            ProfileReadonly.user_id == user_id,
        )
    ).scalar_one_or_none()


def get_user_profile(db: Session, org_id: str, user: UserIdentity) -> Profile | None:
    """
    Get the caller's profile in one organization.

    Never falls back to a profile the same user holds in another organization.
    """
    link = get_profile_link(db, org_id, user.id)
    if link is None:
        return None
    return link.profile


def require_user_profile(db: Session, org_id: str, user: UserIdentity) -> Profile:
    """
    Raises:
        AuthorizationError: Caller has no profile in the organization
    """
    profile = get_user_profile(db, org_id, user)
    if profile is None:
        raise AuthorizationError("User has no profile in this organization")
    return profile


def require_org_admin(db: Session, org_id: str, user: UserIdentity) -> ProfileReadonly:
    """
    Raises:
        AuthorizationError: Caller is not an admin of the organization
    """
    link = get_profile_link(db, org_id, user.id)
    if link is None or not ProfileRole.has_value(link.role):
        raise AuthorizationError()
    if ProfileRole(link.role) not in ROLES_CAN_ADMINISTER:
        raise AuthorizationError(f"Role '{link.role}' not authorized for this action")
    return link


def register_profile(
    db: Session,
    org_id: str,
    user: UserIdentity,
    first_name: str | None = None,
    last_name: str | None = None,
    avatar: str | None = None,
    role: ProfileRole = DEFAULT_PROFILE_ROLE,
) -> Profile:
    """
    Create a profile and its readonly link for (organization, user).

    Both rows are committed together.

    Raises:
        ConflictError: The user already has a profile in this organization
        PersistenceError: Storage failure
    """
    if get_profile_link(db, org_id, user.id) is not None:
        raise ConflictError("Profile already exists")

    profile = Profile(first_name=first_name, last_name=last_name, avatar=avatar)
    try:
        db.add(profile)
        db.flush()
        db.add(
            ProfileReadonly(
                profile_id=profile.id,
                user_id=user.id,
                organization_id=org_id,
                role=role.value,
            )
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Profile already exists")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error creating user profile")
        raise PersistenceError("Error creating user profile")

    db.refresh(profile)
    return profile
