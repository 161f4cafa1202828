"""SQLAlchemy ORM models for tenants, profiles, questions and replies."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, ForeignKey, Index, String, Text, UniqueConstraint, Uuid, func, text
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from squeak.db.base import Base
from squeak.db.enums import DEFAULT_PERMALINK_BASE, DEFAULT_PROFILE_ROLE
from squeak.db.types import BigIntIdentity, EncryptedString, JsonList


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_org_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# Tenant Models
# =============================================================================

class Organization(Base):
    """
    A tenant in the multi-tenant system.

    All domain entities belong to an organization
    and must be scoped by organization_id in all queries.
    """
    __tablename__ = "squeak_organizations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_org_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )

    config: Mapped["SqueakConfig | None"] = relationship(
        back_populates="organization", cascade="all, delete-orphan", uselist=False
    )


class SqueakConfig(Base):
    """Per-organization widget settings (one row per organization)."""
    __tablename__ = "squeak_config"

    id: Mapped[int] = mapped_column(BigIntIdentity, primary_key=True, autoincrement=True)
    organization_id: Mapped[str] = mapped_column(
        ForeignKey("squeak_organizations.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    permalink_base: Mapped[str] = mapped_column(
        String(100), default=DEFAULT_PERMALINK_BASE, server_default=text(f"'{DEFAULT_PERMALINK_BASE}'"), nullable=False
    )
    question_auto_publish: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=text("true"), nullable=False
    )
    company_name: Mapped[str | None] = mapped_column(String(255))
    company_domain: Mapped[str | None] = mapped_column(String(255))

    # Slack (question alerts + history import)
    slack_api_key: Mapped[str | None] = mapped_column(EncryptedString)
    slack_question_channel: Mapped[str | None] = mapped_column(String(100))

    # Cloudinary (image uploads)
    cloudinary_cloud_name: Mapped[str | None] = mapped_column(String(100))
    cloudinary_api_key: Mapped[str | None] = mapped_column(String(100))
    cloudinary_api_secret: Mapped[str | None] = mapped_column(EncryptedString)

    organization: Mapped[Organization] = relationship(back_populates="config")


# =============================================================================
# Profiles
# =============================================================================

class Profile(Base):
    """Tenant-facing identity of a widget user (distinct from the auth user)."""
    __tablename__ = "squeak_profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name: Mapped[str | None] = mapped_column(String(255))
    last_name: Mapped[str | None] = mapped_column(String(255))
    avatar: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )

    readonly: Mapped[list["ProfileReadonly"]] = relationship(
        back_populates="profile", cascade="all, delete-orphan"
    )


class ProfileReadonly(Base):
    """
    Links an auth user to a profile inside one organization and holds the role.

    Users cannot edit this row; it is written by registration and admin flows.
    """
    __tablename__ = "squeak_profiles_readonly"
    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_profiles_readonly_org_user"),
    )

    id: Mapped[int] = mapped_column(BigIntIdentity, primary_key=True, autoincrement=True)
    profile_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("squeak_profiles.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    organization_id: Mapped[str] = mapped_column(
        ForeignKey("squeak_organizations.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_PROFILE_ROLE.value, server_default=text(f"'{DEFAULT_PROFILE_ROLE.value}'"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )

    profile: Mapped[Profile] = relationship(back_populates="readonly")


# =============================================================================
# Questions & Replies
# =============================================================================

class Question(Base):
    """
    A question thread. The author's own text is stored as its first Reply.

    ``slug`` keeps every slug the question has had; ``permalink`` is the
    current resolvable path segment, unique per organization.
    """
    __tablename__ = "squeak_messages"
    __table_args__ = (
        UniqueConstraint("organization_id", "permalink", name="uq_messages_org_permalink"),
        Index("ix_messages_org_slack_ts", "organization_id", "slack_timestamp"),
    )

    id: Mapped[int] = mapped_column(BigIntIdentity, primary_key=True, autoincrement=True)
    subject: Mapped[str | None] = mapped_column(Text)
    slug: Mapped[list[str]] = mapped_column(JsonList, default=list, nullable=False)
    permalink: Mapped[str | None] = mapped_column(String(255))
    published: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    organization_id: Mapped[str] = mapped_column(
        ForeignKey("squeak_organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    profile_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("squeak_profiles.id", ondelete="SET NULL")
    )
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    resolved: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    resolved_reply_id: Mapped[int | None] = mapped_column(
        ForeignKey("squeak_replies.id", ondelete="SET NULL", use_alter=True, name="fk_messages_resolved_reply")
    )
    slack_timestamp: Mapped[str | None] = mapped_column(String(50))

    replies: Mapped[list["Reply"]] = relationship(
        back_populates="question",
        foreign_keys="Reply.message_id",
        cascade="all, delete-orphan",
    )


class Reply(Base):
    """A message in a question thread."""
    __tablename__ = "squeak_replies"

    id: Mapped[int] = mapped_column(BigIntIdentity, primary_key=True, autoincrement=True)
    message_id: Mapped[int] = mapped_column(
        ForeignKey("squeak_messages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    profile_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("squeak_profiles.id", ondelete="SET NULL")
    )
    published: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=text("true"), nullable=False
    )
    organization_id: Mapped[str] = mapped_column(
        ForeignKey("squeak_organizations.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )

    question: Mapped[Question] = relationship(back_populates="replies", foreign_keys=[message_id])
    profile: Mapped[Profile | None] = relationship()


# =============================================================================
# Topics
# =============================================================================

class TopicGroup(Base):
    __tablename__ = "squeak_topic_groups"

    id: Mapped[int] = mapped_column(BigIntIdentity, primary_key=True, autoincrement=True)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    organization_id: Mapped[str] = mapped_column(
        ForeignKey("squeak_organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )

    topics: Mapped[list["Topic"]] = relationship(back_populates="topic_group")


class Topic(Base):
    __tablename__ = "squeak_topics"

    id: Mapped[int] = mapped_column(BigIntIdentity, primary_key=True, autoincrement=True)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    organization_id: Mapped[str] = mapped_column(
        ForeignKey("squeak_organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    topic_group_id: Mapped[int | None] = mapped_column(
        ForeignKey("squeak_topic_groups.id", ondelete="SET NULL")
    )
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )

    topic_group: Mapped[TopicGroup | None] = relationship(back_populates="topics")
