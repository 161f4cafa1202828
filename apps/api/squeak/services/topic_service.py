"""Topic service - organization-scoped topics and topic groups."""

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from squeak.core.exceptions import NotFoundError
from squeak.db.models import Topic, TopicGroup


def list_topics(db: Session, org_id: str) -> list[Topic]:
    """List topics with their group, alphabetically."""
    return list(
        db.execute(
            select(Topic)
            .options(joinedload(Topic.topic_group))
            .where(Topic.organization_id == org_id)
            .order_by(Topic.label)
        ).scalars().all()
    )


def list_topic_groups(db: Session, org_id: str) -> list[TopicGroup]:
    return list(
        db.execute(
            select(TopicGroup)
            .where(TopicGroup.organization_id == org_id)
            .order_by(TopicGroup.label)
        ).scalars().all()
    )


def get_topic(db: Session, org_id: str, topic_id: int) -> Topic | None:
    """Get a topic by ID (org-scoped)."""
    return db.execute(
        select(Topic).where(Topic.id == topic_id, Topic.organization_id == org_id)
    ).scalar_one_or_none()


def get_topic_group(db: Session, org_id: str, group_id: int) -> TopicGroup | None:
    """Get a topic group by ID (org-scoped)."""
    return db.execute(
        select(TopicGroup).where(TopicGroup.id == group_id, TopicGroup.organization_id == org_id)
    ).scalar_one_or_none()


def _require_group(db: Session, org_id: str, group_id: int | None) -> TopicGroup | None:
    if group_id is None:
        return None
    group = get_topic_group(db, org_id, group_id)
    if group is None:
        raise NotFoundError("Topic group not found")
    return group


def create_topic_group(db: Session, org_id: str, label: str) -> TopicGroup:
    group = TopicGroup(organization_id=org_id, label=label.strip())
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


def create_topic(
    db: Session, org_id: str, label: str, topic_group_id: int | None = None
) -> Topic:
    """
    Raises:
        NotFoundError: Group does not exist in the organization
    """
    group = _require_group(db, org_id, topic_group_id)
    topic = Topic(organization_id=org_id, label=label.strip(), topic_group=group)
    db.add(topic)
    db.commit()
    db.refresh(topic)
    return topic


def set_topic_group(
    db: Session, org_id: str, topic_id: int, topic_group_id: int | None
) -> Topic:
    """
    Raises:
        NotFoundError: Topic or group does not exist in the organization
    """
    topic = get_topic(db, org_id, topic_id)
    if topic is None:
        raise NotFoundError("Topic not found")
    topic.topic_group = _require_group(db, org_id, topic_group_id)
    db.commit()
    db.refresh(topic)
    return topic
