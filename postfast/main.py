# postfast/main.py
import logging

from fastapi import FastAPI
from postfast.database import engine, Base, async_session
from postfast.routes import posts, users
from postfast.core.config import get_settings
from postfast.core.deps import get_cache
from postfast.core.exceptions import register_exception_handlers
from postfast.core.logger import setup_logging
from postfast.core.scheduler import PublishScheduler
from postfast.models import post as post_model, user as user_model  # noqa: F401
from postfast.services.cache_sync import CacheSynchronizer
from postfast.services.publisher import ScheduledPublisher

settings = get_settings()
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

app.include_router(posts.router)
app.include_router(users.router)
register_exception_handlers(app)

@app.on_event("startup")
async def startup_event():
    # create tables if they don't exist
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.SCHEDULER_ENABLED:
        cache = await get_cache()
        publisher = ScheduledPublisher(
            async_session, CacheSynchronizer(cache, ttl=settings.CACHE_TTL_SECONDS)
        )
        app.state.publish_scheduler = PublishScheduler(publisher, settings.PUBLISH_INTERVAL_SECONDS)
        app.state.publish_scheduler.start()
    logger.info("%s started (%s)", settings.APP_NAME, settings.APP_ENV)

@app.on_event("shutdown")
async def shutdown_event():
    scheduler = getattr(app.state, "publish_scheduler", None)
    if scheduler is not None:
        scheduler.stop()
    await engine.dispose()
    cache = await get_cache()
    await cache.close()

@app.get("/health")
async def health():
    return {"status": "ok", "app": settings.APP_NAME}
