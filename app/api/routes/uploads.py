# app/api/routes/uploads.py
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.api.deps import get_storage
from app.config import Settings, get_settings
from app.services.storage import ObjectStorage, StorageError
from app.utils.images import InvalidImageError, image_file_name, inspect_image

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["uploads"])


@router.post("/upload-profile-picture")
def upload_profile_picture(
    profilePicture: UploadFile = File(None),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """
    Store a profile picture in the public profile-pictures bucket.
    Returns: { "imageUrl": <public url> }
    """
    if profilePicture is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    contents = profilePicture.file.read()
    if not contents:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
    try:
        content_type, ext = inspect_image(contents)
    except InvalidImageError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    key = image_file_name(profilePicture.filename, ext)
    bucket = settings.PROFILE_PICTURES_BUCKET
    try:
        storage.upload(bucket, key, contents, content_type=content_type)
    except StorageError as e:
        logger.error("Upload error: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="File upload failed")

    return {"imageUrl": storage.public_url(bucket, key)}
