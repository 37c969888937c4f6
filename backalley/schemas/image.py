"""Image Schemas: presigned upload response."""

from pydantic import BaseModel, Field


class ImageUploadResponse(BaseModel):
    url: str
    object_url: str = Field(serialization_alias="objectUrl")
