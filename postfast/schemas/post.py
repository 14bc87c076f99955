# postfast/schemas/post.py
import math
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from postfast.models.post import PostStatus

EXCERPT_LENGTH = 200


def _naive_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class PostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    body: str = Field(min_length=1)
    status: PostStatus = PostStatus.DRAFT
    scheduled_at: datetime | None = None

    @field_validator("scheduled_at")
    @classmethod
    def scheduled_at_utc(cls, value: datetime | None) -> datetime | None:
        return _naive_utc(value)

    @field_validator("title", "body")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class PostUpdate(BaseModel):
    """Partial update; ``None`` means "leave unchanged"."""
    title: str | None = Field(default=None, min_length=1, max_length=200)
    body: str | None = None
    status: PostStatus | None = None
    scheduled_at: datetime | None = None

    @field_validator("scheduled_at")
    @classmethod
    def scheduled_at_utc(cls, value: datetime | None) -> datetime | None:
        return _naive_utc(value)

    @field_validator("title", "body")
    @classmethod
    def not_blank(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("must not be blank")
        return value


class AuthorRead(BaseModel):
    id: int
    username: str

    model_config = ConfigDict(from_attributes=True)


class PostRead(BaseModel):
    """Public post representation; also the cached ``post:<slug>`` payload."""
    id: uuid.UUID
    title: str
    body: str
    slug: str
    status: PostStatus
    scheduled_at: datetime | None = None
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    author: AuthorRead

    model_config = ConfigDict(from_attributes=True)


class PostSummary(BaseModel):
    id: uuid.UUID
    title: str
    slug: str
    excerpt: str
    status: PostStatus
    published_at: datetime | None = None
    author: AuthorRead

    @classmethod
    def from_post(cls, post) -> "PostSummary":
        body = post.body
        excerpt = body[:EXCERPT_LENGTH] + "..." if len(body) > EXCERPT_LENGTH else body
        return cls(
            id=post.id,
            title=post.title,
            slug=post.slug,
            excerpt=excerpt,
            status=post.status,
            published_at=post.published_at,
            author=AuthorRead.model_validate(post.author),
        )


class PostPage(BaseModel):
    """One page of summaries; page 0 of the feed is cached as ``feed:page0``."""
    items: list[PostSummary] = []
    page: int
    size: int
    total: int
    pages: int

    @classmethod
    def build(cls, posts, page: int, size: int, total: int) -> "PostPage":
        return cls(
            items=[PostSummary.from_post(p) for p in posts],
            page=page,
            size=size,
            total=total,
            pages=math.ceil(total / size) if size else 0,
        )
