"""Pydantic schemas for questions and replies."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class QuestionCreate(BaseModel):
    """Widget request to ask a question."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    body: str
    subject: str
    organization_id: str = Field(..., alias="organizationId", min_length=1)
    slug: str | None = None


class QuestionCreateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: int = Field(..., alias="messageId")
    profile_id: UUID = Field(..., alias="profileId")
    subject: str
    body: str
    slug: list[str]
    published: bool
    permalink: str | None = None


class QuestionRead(BaseModel):
    """Question fields exposed by the read path."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    subject: str | None
    slug: list[str]
    created_at: datetime
    published: bool
    slack_timestamp: str | None = None
    resolved: bool
    resolved_reply_id: int | None = None
    permalink: str | None = None


class ReplyProfileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    first_name: str | None = None
    last_name: str | None = None
    avatar: str | None = None


class ReplyMetadata(BaseModel):
    role: str | None = None


class ReplyView(BaseModel):
    """
    Read model of a reply joined with its author.

    ``metadata.role`` comes from the author's readonly profile in the reply's
    organization; it is never stored on the reply.
    """

    id: int
    body: str
    created_at: datetime
    published: bool
    profile: ReplyProfileRead | None = None
    metadata: ReplyMetadata = Field(default_factory=ReplyMetadata)


class QuestionThread(BaseModel):
    """A question with its replies; ``question`` is None on a soft miss."""

    question: QuestionRead | None = None
    replies: list[ReplyView] = Field(default_factory=list)
