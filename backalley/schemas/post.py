"""Post Schemas: creation body and display DTOs."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from backalley.core.records import PostRecord, ReplyRecord


class PostRequest(BaseModel):
    text: str = Field(max_length=200)


class AuthorDto(BaseModel):
    name: str


class ReplyDto(BaseModel):
    id: int
    author: AuthorDto
    created_at: str = Field(serialization_alias="createdAt")
    text: str
    image_url: str | None = Field(None, serialization_alias="imageUrl")

    @classmethod
    def from_record(cls, record: ReplyRecord) -> "ReplyDto":
        return cls(
            id=record.id, author=AuthorDto(name=record.author_name),
            created_at=iso_utc(record.created_at), text=record.text,
            image_url=record.image_url,
        )


class PostDto(BaseModel):
    id: int
    author: AuthorDto
    text: str
    created_at: str = Field(serialization_alias="createdAt")
    room: str
    image_url: str | None = Field(None, serialization_alias="imageUrl")
    replies: list[ReplyDto] = []

    @classmethod
    def from_record(cls, record: PostRecord) -> "PostDto":
        return cls(
            id=record.id, author=AuthorDto(name=record.author_name),
            text=record.text, created_at=iso_utc(record.created_at),
            room=record.room, image_url=record.image_url,
            replies=[ReplyDto.from_record(r) for r in record.replies],
        )


def iso_utc(moment: datetime) -> str:
    """ISO-8601 with a trailing Z; naive datetimes are treated as UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.isoformat() + "Z"
