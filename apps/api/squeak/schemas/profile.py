"""Pydantic schemas for widget user registration."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Sent by the widget right after the user signs up with the auth provider."""

    model_config = ConfigDict(populate_by_name=True)

    token: str | None = None
    organization_id: str | None = Field(None, alias="organizationId")
    first_name: str | None = Field(None, alias="firstName", max_length=255)
    last_name: str | None = Field(None, alias="lastName", max_length=255)
    avatar: str | None = None


class RegisterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    profile_id: UUID = Field(..., alias="profileId")
    first_name: str | None = Field(None, alias="firstName")
    last_name: str | None = Field(None, alias="lastName")
    avatar: str | None = None
    organization_id: str = Field(..., alias="organizationId")
