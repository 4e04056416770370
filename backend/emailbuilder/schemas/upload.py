"""
Email Builder Backend — Image Upload Schemas
=============================================
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UploadedImage(BaseModel):
    """Result of a completed upload to the media host."""
    url: str = Field(description="Durable, publicly reachable URL")
    public_id: Optional[str] = Field(default=None, description="Host-side asset identifier")


class ImageUploadResponse(BaseModel):
    """Body of POST /api/upload-image: `{"imageUrl": "https://..."}`."""
    image_url: str = Field(description="Public URL of the uploaded image")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
