# postfast/services/publisher.py
"""
Scheduled publisher: promotes SCHEDULED posts whose time has come.

One ``tick`` finds the due set, promotes each post in its own transaction
and purges the feed cache once if anything was promoted. Ticks never
overlap; a tick requested while another runs is skipped.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from postfast.crud.post import post as post_store
from postfast.database import utcnow
from postfast.models.post import PostStatus
from postfast.services.cache_sync import CacheSynchronizer

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    due: int = 0
    published: list[str] = field(default_factory=list)
    failed: list[uuid.UUID] = field(default_factory=list)
    skipped: bool = False


class ScheduledPublisher:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        cache_sync: CacheSynchronizer,
        clock: Callable[[], datetime] = utcnow,
        store=post_store,
    ):
        self.session_factory = session_factory
        self.cache_sync = cache_sync
        self.clock = clock
        self.store = store
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    async def tick(self) -> TickResult:
        if self._lock.locked():
            logger.warning("Previous publish tick still running, skipping this one")
            return TickResult(skipped=True)

        async with self._lock:
            return await self._run()

    async def _run(self) -> TickResult:
        now = self.clock()
        result = TickResult()

        async with self.session_factory() as db:
            due = await self.store.find_due_scheduled(db, now)
            due_ids = [p.id for p in due]
        result.due = len(due_ids)

        try:
            for post_id in due_ids:
                try:
                    slug = await self._promote(post_id)
                except Exception:
                    # left SCHEDULED, so the next tick picks it up again
                    logger.error("Failed to publish scheduled post %s", post_id, exc_info=True)
                    result.failed.append(post_id)
                    continue
                if slug is not None:
                    logger.info("Scheduled post published: %s", slug)
                    result.published.append(slug)
        finally:
            await self.cache_sync.scheduled_batch_published(len(result.published))
        return result

    async def _promote(self, post_id: uuid.UUID) -> str | None:
        async with self.session_factory() as db:
            try:
                post = await self.store.get_by_id(db, post_id)
                now = self.clock()
                # an edit may have raced us since the due query
                if post is None or post.status is not PostStatus.SCHEDULED:
                    return None
                if post.scheduled_at is None or post.scheduled_at > now:
                    return None
                post.status = PostStatus.PUBLISHED
                post.published_at = now
                await self.store.save(db, post)
                return post.slug
            except Exception:
                await db.rollback()
                raise
