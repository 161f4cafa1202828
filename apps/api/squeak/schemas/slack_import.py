"""Pydantic schemas for Slack history import."""

from pydantic import BaseModel, ConfigDict, Field


class SlackReplyItem(BaseModel):
    ts: str
    body: str


class SlackThread(BaseModel):
    """A Slack thread as shown to the admin before import."""

    ts: str
    reply_count: int | None = None
    client_msg_id: str | None = None
    subject: str = ""
    slug: str = ""
    body: str = ""
    replies: list[SlackReplyItem] | None = None


class SlackImportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    organization_id: str = Field(..., alias="organizationId", min_length=1)
    messages: list[SlackThread] = Field(..., min_length=1)


class SlackImportResponse(BaseModel):
    imported: list[int]
    skipped: list[str]
