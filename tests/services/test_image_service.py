"""Image Service: size checks, per-author quota, presigned URL issuance.

Tests cover:
    - Valid request -> presigned URL + public object URL, one images row
    - Size 0, negative or above the limit -> UploadRejectedError, nothing presigned
    - Author at quota -> ImageQuotaExceededError, nothing presigned
    - A failed presign releases the quota slot
    - Two concurrent requests at quota - 1: exactly one gets a URL
"""

import asyncio

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from backalley.core.errors import (
    ImageQuotaExceededError, ObjectStorageError, UploadRejectedError,
)
from backalley.db.base import Base
from backalley.models.author import Author
from backalley.models.image import Image
from backalley.services.image_service import ImageService
from tests.services.helpers import FakePresigner

MAX_BYTES = 1024


@pytest.fixture
def images(test_db, presigner):
    return ImageService(test_db, presigner, max_bytes=MAX_BYTES, quota=2)


async def _image_count(db) -> int:
    result = await db.execute(select(func.count(Image.id)))
    return result.scalar_one()


async def test_upload_returns_presigned_and_public_url(images, presigner, test_db, root_author):
    upload = await images.request_upload(root_author, "image/png", 512)

    object_key, content_type, size = presigner.calls[0]
    assert upload.url.startswith(f"https://storage.test/csc/{object_key}")
    assert upload.object_url == f"https://cdn.test/csc/{object_key}"
    assert (content_type, size) == ("image/png", 512)
    assert await _image_count(test_db) == 1


async def test_each_upload_gets_a_fresh_key(images, presigner, root_author):
    await images.request_upload(root_author, "image/png", 10)
    await images.request_upload(root_author, "image/png", 10)
    assert presigner.calls[0][0] != presigner.calls[1][0]


@pytest.mark.parametrize("size", [0, -1, MAX_BYTES + 1])
async def test_size_outside_limits_is_rejected(images, presigner, test_db, root_author, size):
    with pytest.raises(UploadRejectedError):
        await images.request_upload(root_author, "image/png", size)
    assert presigner.calls == []
    assert await _image_count(test_db) == 0


async def test_size_at_limit_is_accepted(images, root_author):
    assert await images.request_upload(root_author, "image/png", MAX_BYTES)


async def test_quota_blocks_further_uploads(images, presigner, root_author):
    await images.request_upload(root_author, "image/png", 10)
    await images.request_upload(root_author, "image/png", 10)
    assert not await images.can_upload(root_author)

    with pytest.raises(ImageQuotaExceededError):
        await images.request_upload(root_author, "image/png", 10)
    assert len(presigner.calls) == 2


async def test_quota_is_per_author(images, root_author, author_factory):
    other = await author_factory("other")
    await images.request_upload(root_author, "image/png", 10)
    await images.request_upload(root_author, "image/png", 10)
    assert await images.can_upload(other)


class FailingPresigner(FakePresigner):
    def presign_put(self, object_key: str, content_type: str, size: int) -> str:
        raise ObjectStorageError("endpoint unreachable")


async def test_failed_presign_releases_quota_slot(test_db, root_author):
    images = ImageService(test_db, FailingPresigner(), max_bytes=MAX_BYTES, quota=1)
    with pytest.raises(ObjectStorageError):
        await images.request_upload(root_author, "image/png", 10)

    row = await test_db.execute(
        select(Author.image_count).where(Author.id == root_author),
    )
    assert row.scalar_one() == 0
    assert await _image_count(test_db) == 0


# ─── Concurrency ─────────────────────────────────────────────────

async def test_concurrent_uploads_at_quota_edge_admit_one(tmp_path):
    """Two connections race for the last slot; the conditional UPDATE admits one."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'images.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with factory() as db:
        author = Author(name="root", password_hash="x", image_count=1)
        db.add(author)
        await db.commit()
        author_id = author.id

    presigner = FakePresigner()

    async def attempt() -> bool:
        async with factory() as db:
            images = ImageService(db, presigner, max_bytes=MAX_BYTES, quota=2)
            try:
                await images.request_upload(author_id, "image/png", 10)
                return True
            except ImageQuotaExceededError:
                return False

    try:
        results = await asyncio.gather(attempt(), attempt())
        assert sorted(results) == [False, True]
        assert len(presigner.calls) == 1

        async with factory() as db:
            row = await db.execute(
                select(Author.image_count).where(Author.id == author_id),
            )
            assert row.scalar_one() == 2
            assert await _image_count(db) == 1
    finally:
        await engine.dispose()
