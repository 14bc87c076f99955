# postfast/services/cache_sync.py
"""
Translates post lifecycle events into cache writes and purges.

Rules, for the keys ``post:<slug>`` and ``feed:page0``:

* every call is made after the store commit it describes;
* when the fresh value is at hand (the just-saved post) it is written,
  otherwise the key is purged;
* the feed is purged only when a post crosses the PUBLISHED boundary, so a
  body edit of an already published post can leave page 0 stale until TTL;
* cache errors are logged and swallowed, never raised to the caller.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from postfast.models.post import PostStatus
from postfast.schemas.post import PostPage, PostRead
from postfast.services.cache import CacheBackend

logger = logging.getLogger(__name__)

POST_KEY_PREFIX = "post:"
FEED_PAGE0_KEY = "feed:page0"
DEFAULT_TTL = 600


def post_key(slug: str) -> str:
    return f"{POST_KEY_PREFIX}{slug}"


class CacheSynchronizer:
    def __init__(self, cache: CacheBackend, ttl: int = DEFAULT_TTL):
        self.cache = cache
        self.ttl = ttl

    # --- best-effort primitives ---

    async def _get(self, key: str) -> Optional[bytes]:
        try:
            return await self.cache.get(key)
        except Exception:
            logger.warning("Cache read failed for %s", key, exc_info=True)
            return None

    async def _set(self, key: str, value: bytes) -> None:
        try:
            await self.cache.set(key, value, self.ttl)
        except Exception:
            logger.warning("Cache write failed for %s", key, exc_info=True)

    async def _delete(self, key: str) -> None:
        try:
            await self.cache.delete(key)
        except Exception:
            logger.warning("Cache purge failed for %s", key, exc_info=True)

    # --- read-through ---

    async def cached_post(self, slug: str) -> Optional[PostRead]:
        key = post_key(slug)
        raw = await self._get(key)
        if raw is None:
            return None
        try:
            cached = PostRead.model_validate_json(raw)
        except ValidationError:
            logger.warning("Dropping unreadable cache entry %s", key)
            await self._delete(key)
            return None
        # only published copies are ever written; anything else is foreign
        if cached.status is not PostStatus.PUBLISHED:
            await self._delete(key)
            return None
        return cached

    async def cached_feed(self) -> Optional[PostPage]:
        raw = await self._get(FEED_PAGE0_KEY)
        if raw is None:
            return None
        try:
            return PostPage.model_validate_json(raw)
        except ValidationError:
            logger.warning("Dropping unreadable cache entry %s", FEED_PAGE0_KEY)
            await self._delete(FEED_PAGE0_KEY)
            return None

    async def store_post(self, post: PostRead) -> None:
        if post.status is PostStatus.PUBLISHED:
            await self._set(post_key(post.slug), post.model_dump_json().encode())

    async def store_feed(self, page: PostPage) -> None:
        await self._set(FEED_PAGE0_KEY, page.model_dump_json().encode())

    async def invalidate_post(self, slug: str) -> None:
        await self._delete(post_key(slug))

    async def invalidate_feed(self) -> None:
        await self._delete(FEED_PAGE0_KEY)

    # --- lifecycle events ---

    async def post_created(self, post: PostRead) -> None:
        if post.status is PostStatus.PUBLISHED:
            await self.store_post(post)
            await self.invalidate_feed()

    async def post_updated(self, post: PostRead, old_slug: str, old_status: PostStatus) -> None:
        if old_slug != post.slug:
            await self.invalidate_post(old_slug)

        if post.status is PostStatus.PUBLISHED:
            await self.store_post(post)
        else:
            # covers "was cached as published, now unpublished"
            await self.invalidate_post(post.slug)

        was_published = old_status is PostStatus.PUBLISHED
        if was_published != (post.status is PostStatus.PUBLISHED):
            await self.invalidate_feed()

    async def post_deleted(self, slug: str, status: PostStatus) -> None:
        await self.invalidate_post(slug)
        if status is PostStatus.PUBLISHED:
            await self.invalidate_feed()

    async def scheduled_batch_published(self, count: int) -> None:
        # newly published posts are cached lazily on their first read
        if count > 0:
            await self.invalidate_feed()
