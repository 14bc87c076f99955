# postfast/core/deps.py
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from jose import JWTError
from postfast.core.config import get_settings
from postfast.core.permissions import Requester
from postfast.database import get_db
from postfast.crud.user import user as user_crud
from postfast.models.user import User
from postfast.schemas.user import TokenData
from postfast.core.security import decode_access_token
from postfast.services.cache import CacheBackend, NullCache, RedisCache
from postfast.services.cache_sync import CacheSynchronizer
from postfast.services.posts import PostService
from postfast.services.slug import SlugGenerator

# Tokens are issued by the identity service; tokenUrl only feeds the OpenAPI docs.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)

# Shared cache connection (one pool for the whole process)
cache_backend: Optional[CacheBackend] = None


async def get_cache() -> CacheBackend:
    global cache_backend
    if cache_backend is None:
        settings = get_settings()
        cache_backend = RedisCache.from_url(settings.REDIS_URL) if settings.CACHE_ENABLED else NullCache()
    return cache_backend


async def _user_from_token(token: str, db: AsyncSession) -> Optional[User]:
    try:
        payload = decode_access_token(token)
        token_data = TokenData(sub=payload.get("sub"))
        if token_data.sub is None:
            return None
        user_id = int(token_data.sub)
    except (JWTError, ValueError):
        return None

    user = await user_crud.get_by_id(db, user_id)
    if not user or not user.is_active:
        return None
    return user


async def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db: AsyncSession = Depends(get_db)):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception
    user = await _user_from_token(token, db)
    if user is None:
        raise credentials_exception
    return user


async def get_optional_user(token: Optional[str] = Depends(oauth2_scheme), db: AsyncSession = Depends(get_db)):
    """Anonymous readers get ``None`` instead of a 401."""
    if not token:
        return None
    return await _user_from_token(token, db)


def to_requester(user: Optional[User]) -> Optional[Requester]:
    if user is None:
        return None
    return Requester(id=user.id, role=user.role)


async def get_requester(current_user: User = Depends(get_current_user)) -> Requester:
    return to_requester(current_user)


async def get_optional_requester(current_user: Optional[User] = Depends(get_optional_user)) -> Optional[Requester]:
    return to_requester(current_user)


async def get_post_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheBackend = Depends(get_cache),
) -> PostService:
    settings = get_settings()
    return PostService(
        db,
        CacheSynchronizer(cache, ttl=settings.CACHE_TTL_SECONDS),
        slugs=SlugGenerator(max_attempts=settings.SLUG_MAX_ATTEMPTS),
        feed_page_size=settings.FEED_PAGE_SIZE,
    )
