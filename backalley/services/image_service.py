"""Image Service: per-author image quota check and presigned upload issuance.

Invariants:
    - Declared size must be in 1..max_bytes, else UploadRejectedError
    - An author holding `quota` images gets ImageQuotaExceededError, no URL presigned
    - The quota slot is claimed by a conditional UPDATE on authors.image_count, so
      concurrent requests at quota - 1 admit exactly one
    - Object keys are fresh UUID4 strings; one images row per issued URL
"""

import logging
import uuid

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backalley.core.domain_types import AuthorId
from backalley.core.errors import (
    ImageQuotaExceededError, ObjectStorageError, UploadRejectedError,
)
from backalley.core.records import ImageUpload
from backalley.core.repository_protocols import ObjectStoragePresigner
from backalley.models.author import Author
from backalley.models.image import Image

logger = logging.getLogger(__name__)


class ImageService:

    def __init__(
        self,
        db: AsyncSession,
        presigner: ObjectStoragePresigner,
        max_bytes: int,
        quota: int,
    ):
        self.db = db
        self.presigner = presigner
        self.max_bytes = max_bytes
        self.quota = quota

    async def can_upload(self, author_id: AuthorId) -> bool:
        result = await self.db.execute(
            select(Author.image_count).where(Author.id == author_id),
        )
        count = result.scalar_one_or_none()
        return count is not None and count < self.quota

    async def request_upload(
        self, author_id: AuthorId, content_type: str, size: int,
    ) -> ImageUpload:
        if size <= 0 or size > self.max_bytes:
            raise UploadRejectedError(size, self.max_bytes)

        claimed = await self.db.execute(
            update(Author)
            .where(Author.id == author_id)
            .where(Author.image_count < self.quota)
            .values(image_count=Author.image_count + 1)
            .execution_options(synchronize_session=False),
        )
        if claimed.rowcount == 0:
            await self.db.rollback()
            logger.info("Image quota reached", extra={"author_id": author_id})
            raise ImageQuotaExceededError(self.quota)

        object_key = str(uuid.uuid4())
        try:
            url = self.presigner.presign_put(object_key, content_type, size)
        except ObjectStorageError:
            await self.db.rollback()
            raise
        upload = ImageUpload(url=url, object_url=self.presigner.public_url(object_key))
        self.db.add(Image(
            url=upload.url, object_url=upload.object_url, size=size, author_id=author_id,
        ))
        await self.db.commit()
        return upload
