# postfast/core/scheduler.py
"""
Timer that drives the scheduled publisher.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from postfast.services.publisher import ScheduledPublisher

logger = logging.getLogger(__name__)

JOB_ID = "publish_scheduled_posts"


class PublishScheduler:
    """Runs ``ScheduledPublisher.tick`` every ``interval_seconds``."""

    def __init__(self, publisher: ScheduledPublisher, interval_seconds: int = 60):
        self.publisher = publisher
        self.interval_seconds = interval_seconds
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.is_running = False

    def start(self):
        if self.is_running:
            logger.warning("Publish scheduler already running")
            return

        self.scheduler.add_job(
            self.publisher.tick,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID,
            name=f"Publish due scheduled posts every {self.interval_seconds}s",
            replace_existing=True,
            # never two ticks over the same due set
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        self.is_running = True
        logger.info("Publish scheduler started (every %ss)", self.interval_seconds)

    def stop(self):
        if self.is_running:
            self.scheduler.shutdown(wait=False)
            self.is_running = False
            logger.info("Publish scheduler stopped")
