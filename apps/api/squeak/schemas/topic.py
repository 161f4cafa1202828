"""Pydantic schemas for topics and topic groups."""

from pydantic import BaseModel, ConfigDict, Field


class TopicGroupCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    organization_id: str = Field(..., alias="organizationId", min_length=1)
    label: str = Field(..., min_length=1, max_length=255)


class TopicCreate(TopicGroupCreate):
    topic_group_id: int | None = Field(None, alias="topicGroupId")


class TopicUpdate(BaseModel):
    """Move a topic into a group; ``topicGroupId: null`` removes it from its group."""

    model_config = ConfigDict(populate_by_name=True)

    organization_id: str = Field(..., alias="organizationId", min_length=1)
    topic_group_id: int | None = Field(None, alias="topicGroupId")


class TopicGroupRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    label: str


class TopicRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    label: str
    topic_group: TopicGroupRead | None = None
