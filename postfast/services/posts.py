# postfast/services/posts.py
"""
Post lifecycle: create / update / delete and the public read paths.

The store is authoritative. Every write commits first and only then tells
the ``CacheSynchronizer`` what happened; cache trouble never fails a call.
"""

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from postfast.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    UnavailableError,
    ValidationFailedError,
)
from postfast.core.permissions import Requester, can_modify, requester_can_modify
from postfast.crud.post import post as post_store
from postfast.database import utcnow
from postfast.models.post import Post, PostStatus
from postfast.schemas.post import PostCreate, PostPage, PostRead, PostUpdate
from postfast.services.cache_sync import CacheSynchronizer
from postfast.services.slug import SlugGenerator

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


class PostService:
    def __init__(
        self,
        db: AsyncSession,
        cache_sync: CacheSynchronizer,
        slugs: Optional[SlugGenerator] = None,
        clock: Callable[[], datetime] = utcnow,
        can_modify: Callable = can_modify,
        feed_page_size: int = DEFAULT_PAGE_SIZE,
        store=post_store,
    ):
        self.db = db
        self.cache_sync = cache_sync
        self.slugs = slugs or SlugGenerator(store=store)
        self.clock = clock
        self.can_modify = can_modify
        self.feed_page_size = feed_page_size
        self.store = store

    # --- helpers ---

    def _may_modify(self, requester: Optional[Requester], post: Post) -> bool:
        return requester_can_modify(requester, post.author_id, check=self.can_modify)

    async def _load_for_change(self, post_id: uuid.UUID, requester: Optional[Requester]) -> Post:
        if requester is None:
            raise UnauthorizedError("Authentication required")
        post = await self.store.get_by_id(self.db, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        if not self._may_modify(requester, post):
            raise ForbiddenError("You don't have permission to modify this post")
        return post

    async def _store_failed(self, action: str, exc: SQLAlchemyError) -> UnavailableError:
        await self.db.rollback()
        logger.error("Post store failed during %s", action, exc_info=exc)
        return UnavailableError("Post store unavailable")

    # --- writes ---

    async def create(self, requester: Optional[Requester], data: PostCreate) -> PostRead:
        if requester is None:
            raise UnauthorizedError("Authentication required")
        if data.status is PostStatus.SCHEDULED and data.scheduled_at is None:
            raise ValidationFailedError("scheduled_at is required for scheduled posts")

        post_id = uuid.uuid4()
        try:
            slug = await self.slugs.generate(self.db, data.title, post_id=post_id)
            post = Post(
                id=post_id,
                author_id=requester.id,
                title=data.title,
                body=data.body,
                slug=slug,
                status=data.status,
                scheduled_at=data.scheduled_at,
            )
            if data.status is PostStatus.PUBLISHED:
                post.published_at = self.clock()
            post = await self.store.insert(self.db, post)
        except SQLAlchemyError as exc:
            raise await self._store_failed("create", exc) from exc

        logger.info("Post created: %s (%s) by user %s", post.slug, post.status.value, requester.id)
        result = PostRead.model_validate(post)
        await self.cache_sync.post_created(result)
        return result

    async def update(self, post_id: uuid.UUID, requester: Optional[Requester], data: PostUpdate) -> PostRead:
        post = await self._load_for_change(post_id, requester)

        old_slug = post.slug
        old_status = post.status
        new_status = data.status if data.status is not None else old_status
        # an existing time is only kept by a post that is already SCHEDULED
        scheduled_at = data.scheduled_at
        if scheduled_at is None and old_status is PostStatus.SCHEDULED:
            scheduled_at = post.scheduled_at
        if new_status is PostStatus.SCHEDULED and scheduled_at is None:
            raise ValidationFailedError("scheduled_at is required for scheduled posts")

        try:
            if data.title is not None and data.title != post.title:
                post.title = data.title
                post.slug = await self.slugs.generate(
                    self.db, data.title, post_id=post.id, exclude_id=post.id
                )
            if data.body is not None:
                post.body = data.body
            if data.scheduled_at is not None:
                post.scheduled_at = data.scheduled_at

            post.status = new_status
            if new_status is PostStatus.PUBLISHED:
                if old_status is not PostStatus.PUBLISHED:
                    post.published_at = self.clock()
            else:
                post.published_at = None

            post = await self.store.save(self.db, post)
        except SQLAlchemyError as exc:
            raise await self._store_failed("update", exc) from exc

        logger.info("Post updated: %s (%s -> %s)", post.slug, old_status.value, post.status.value)
        result = PostRead.model_validate(post)
        await self.cache_sync.post_updated(result, old_slug=old_slug, old_status=old_status)
        return result

    async def delete(self, post_id: uuid.UUID, requester: Optional[Requester]) -> None:
        post = await self._load_for_change(post_id, requester)
        slug, status = post.slug, post.status

        # purge first so no reader repopulates from a row about to vanish,
        # then again once the delete is committed
        await self.cache_sync.post_deleted(slug, status)
        try:
            await self.store.delete(self.db, post)
        except SQLAlchemyError as exc:
            raise await self._store_failed("delete", exc) from exc
        await self.cache_sync.post_deleted(slug, status)

        logger.info("Post deleted: %s", slug)

    # --- reads ---

    async def get_by_slug(self, slug: str, requester: Optional[Requester] = None) -> PostRead:
        cached = await self.cache_sync.cached_post(slug)
        if cached is not None:
            return cached

        post = await self.store.get_by_slug(self.db, slug)
        if post is None:
            raise NotFoundError("Post not found")

        if not post.is_published:
            # same answer as "missing" so drafts don't leak
            if not self._may_modify(requester, post):
                raise NotFoundError("Post not found")
            return PostRead.model_validate(post)

        result = PostRead.model_validate(post)
        await self.cache_sync.store_post(result)
        return result

    async def get_published_feed(self, page: int = 0, size: Optional[int] = None) -> PostPage:
        size = size or self.feed_page_size
        # only the default-sized first page is cacheable
        cacheable = page == 0 and size == self.feed_page_size

        if cacheable:
            cached = await self.cache_sync.cached_feed()
            if cached is not None:
                return cached

        posts, total = await self.store.list_published(self.db, offset=page * size, limit=size)
        result = PostPage.build(posts, page=page, size=size, total=total)

        if cacheable:
            await self.cache_sync.store_feed(result)
        return result

    async def get_by_author(
        self,
        author_id: int,
        requester: Optional[Requester] = None,
        page: int = 0,
        size: Optional[int] = None,
    ) -> PostPage:
        size = size or self.feed_page_size
        status = None if requester_can_modify(requester, author_id, check=self.can_modify) else PostStatus.PUBLISHED
        posts, total = await self.store.list_by_author(
            self.db, author_id, status=status, offset=page * size, limit=size
        )
        return PostPage.build(posts, page=page, size=size, total=total)
