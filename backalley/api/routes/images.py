"""Image Routes: presigned upload URLs for authenticated authors.

Invariants:
    - Requires a live session (NotAuthenticatedError -> 403)
    - Size above the limit -> 400, quota reached -> 403, both via ForumError handler
"""

from fastapi import APIRouter, Depends, Query

from backalley.api.dependencies import current_author_id, get_image_service
from backalley.core.domain_types import AuthorId
from backalley.schemas.image import ImageUploadResponse
from backalley.services.image_service import ImageService

router = APIRouter(prefix="/image", tags=["images"])


@router.get("/upload", response_model=ImageUploadResponse)
async def request_upload(
    content_type: str = Query(alias="contentType", min_length=1),
    file_size: int = Query(alias="fileSize"),
    author_id: AuthorId = Depends(current_author_id),
    images: ImageService = Depends(get_image_service),
):
    upload = await images.request_upload(author_id, content_type, file_size)
    return ImageUploadResponse(url=upload.url, object_url=upload.object_url)
