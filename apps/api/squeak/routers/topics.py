"""Topics router - topic listing and admin grouping."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from squeak.core.deps import get_db, require_user
from squeak.core.security import UserIdentity
from squeak.schemas.topic import (
    TopicCreate,
    TopicGroupCreate,
    TopicGroupRead,
    TopicRead,
    TopicUpdate,
)
from squeak.services import profile_service, topic_service

router = APIRouter()


@router.get("/topics", response_model=list[TopicRead])
def list_topics(
    organization_id: str = Query(..., alias="organizationId", min_length=1),
    db: Session = Depends(get_db),
):
    return topic_service.list_topics(db, organization_id)


@router.get("/topic-groups", response_model=list[TopicGroupRead])
def list_topic_groups(
    organization_id: str = Query(..., alias="organizationId", min_length=1),
    db: Session = Depends(get_db),
):
    return topic_service.list_topic_groups(db, organization_id)


@router.post("/topics", response_model=TopicRead, status_code=201)
def create_topic(
    data: TopicCreate,
    user: UserIdentity = Depends(require_user),
    db: Session = Depends(get_db),
):
    profile_service.require_org_admin(db, data.organization_id, user)
    return topic_service.create_topic(db, data.organization_id, data.label, data.topic_group_id)


@router.post("/topic-groups", response_model=TopicGroupRead, status_code=201)
def create_topic_group(
    data: TopicGroupCreate,
    user: UserIdentity = Depends(require_user),
    db: Session = Depends(get_db),
):
    profile_service.require_org_admin(db, data.organization_id, user)
    return topic_service.create_topic_group(db, data.organization_id, data.label)


@router.patch("/topics/{topic_id}", response_model=TopicRead)
def update_topic(
    topic_id: int,
    data: TopicUpdate,
    user: UserIdentity = Depends(require_user),
    db: Session = Depends(get_db),
):
    """Add a topic to a group, or remove it from its group."""
    profile_service.require_org_admin(db, data.organization_id, user)
    return topic_service.set_topic_group(db, data.organization_id, topic_id, data.topic_group_id)
