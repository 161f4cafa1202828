"""Pydantic schemas for image uploads."""

from pydantic import BaseModel, ConfigDict, Field


class ImageUploadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    organization_id: str = Field(..., alias="organizationId", min_length=1)
    image: str = Field(..., min_length=1, description="Data URI or remote URL")


class ImageUploadResponse(BaseModel):
    public_id: str
    format: str
    version: int
    secure_url: str | None = None
