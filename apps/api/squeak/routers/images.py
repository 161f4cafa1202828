"""Image router - uploads widget images to the organization's Cloudinary account."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from squeak.core.async_utils import run_async
from squeak.core.deps import get_db, get_image_uploader, require_user
from squeak.core.security import UserIdentity
from squeak.schemas.image import ImageUploadRequest, ImageUploadResponse
from squeak.services import config_service, profile_service
from squeak.services.image_service import CloudinaryUploader, cloudinary_config_for

router = APIRouter()


@router.post("/image", response_model=ImageUploadResponse)
def upload_image(
    data: ImageUploadRequest,
    user: UserIdentity = Depends(require_user),
    uploader: CloudinaryUploader = Depends(get_image_uploader),
    db: Session = Depends(get_db),
):
    profile_service.require_user_profile(db, data.organization_id, user)
    config = config_service.require_config(db, data.organization_id)
    uploaded = run_async(uploader.upload_image(data.image, cloudinary_config_for(config)))
    return ImageUploadResponse(
        public_id=uploaded.public_id,
        format=uploaded.format,
        version=uploaded.version,
        secure_url=uploaded.secure_url,
    )
