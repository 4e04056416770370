"""
Email Builder Backend — Image Upload Route Handler
===================================================

What:  POST /api/upload-image — pushes one image to the media host and
       returns its public URL.
How:   Reads the multipart field `image`, hands the stream to the injected
       MediaUploader, closes the spooled upload afterwards.

Request Flow:
    1. Client sends multipart/form-data with an `image` field
    2. No field (or an empty one) → 400, nothing is uploaded
    3. MediaUploader checks the format and uploads
    4. 200 {"imageUrl": "https://res.cloudinary.com/..."}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from emailbuilder.dependencies import get_media_uploader
from emailbuilder.exceptions import ValidationError
from emailbuilder.schemas.common import ErrorResponse
from emailbuilder.schemas.upload import ImageUploadResponse
from emailbuilder.services.media_base import MediaUploader

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Images"])


@router.post(
    "/upload-image",
    response_model=ImageUploadResponse,
    responses={
        400: {"description": "No image attached or unsupported format", "model": ErrorResponse},
        500: {"description": "Media host failure", "model": ErrorResponse},
    },
    summary="Upload an image for use in a template",
    description="Accepts JPG, JPEG, PNG or GIF in the multipart field `image`.",
)
async def upload_image(
    image: Optional[UploadFile] = File(
        default=None,
        description="Image file (jpg, jpeg, png, gif)",
    ),
    uploader: MediaUploader = Depends(get_media_uploader),
) -> ImageUploadResponse:
    if image is None or not image.filename:
        raise ValidationError(message="No image uploaded.", field="image")

    logger.info(
        "Received image upload: filename=%s, size=%s bytes",
        image.filename,
        image.size if image.size is not None else "unknown",
    )

    try:
        uploaded = await uploader.upload(image.file, image.filename)
    finally:
        await image.close()

    return ImageUploadResponse(image_url=uploaded.url)
