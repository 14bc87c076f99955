# postfast/crud/post.py
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from postfast.models.post import Post, PostStatus


class CRUDPost:
    """Post store. Writes commit; callers sync the cache afterwards."""

    async def get_by_id(self, db: AsyncSession, post_id: uuid.UUID) -> Optional[Post]:
        q = select(Post).where(Post.id == post_id)
        res = await db.execute(q)
        return res.scalars().first()

    async def get_by_slug(self, db: AsyncSession, slug: str) -> Optional[Post]:
        q = select(Post).where(Post.slug == slug)
        res = await db.execute(q)
        return res.scalars().first()

    async def exists_by_slug(self, db: AsyncSession, slug: str, exclude_id: uuid.UUID | None = None) -> bool:
        q = select(Post.id).where(Post.slug == slug)
        if exclude_id is not None:
            q = q.where(Post.id != exclude_id)
        res = await db.execute(q.limit(1))
        return res.first() is not None

    async def insert(self, db: AsyncSession, post: Post) -> Post:
        db.add(post)
        await db.commit()
        await db.refresh(post)
        return post

    async def save(self, db: AsyncSession, post: Post) -> Post:
        await db.commit()
        await db.refresh(post)
        return post

    async def delete(self, db: AsyncSession, post: Post) -> None:
        await db.delete(post)
        await db.commit()

    async def _page(self, db: AsyncSession, criteria, order_by, offset: int, limit: int) -> tuple[list[Post], int]:
        total = await db.scalar(select(func.count(Post.id)).where(*criteria))
        q = select(Post).where(*criteria).order_by(*order_by).offset(offset).limit(limit)
        res = await db.execute(q)
        return list(res.scalars().all()), total or 0

    async def list_published(self, db: AsyncSession, offset: int = 0, limit: int = 10) -> tuple[list[Post], int]:
        criteria = [Post.status == PostStatus.PUBLISHED]
        order_by = [Post.published_at.desc(), Post.created_at.desc()]
        return await self._page(db, criteria, order_by, offset, limit)

    async def list_by_author(
        self,
        db: AsyncSession,
        author_id: int,
        status: PostStatus | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[Post], int]:
        criteria = [Post.author_id == author_id]
        if status is not None:
            criteria.append(Post.status == status)
        return await self._page(db, criteria, [Post.created_at.desc()], offset, limit)

    async def find_due_scheduled(self, db: AsyncSession, now: datetime) -> list[Post]:
        q = (
            select(Post)
            .where(Post.status == PostStatus.SCHEDULED, Post.scheduled_at <= now)
            .order_by(Post.scheduled_at)
        )
        res = await db.execute(q)
        return list(res.scalars().all())

post = CRUDPost()
