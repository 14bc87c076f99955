# postfast/routes/posts.py
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from postfast.core.config import get_settings
from postfast.core.deps import get_optional_requester, get_post_service, get_requester
from postfast.core.permissions import Requester
from postfast.schemas.post import PostCreate, PostPage, PostRead, PostUpdate
from postfast.services.posts import PostService

router = APIRouter(prefix="/api/posts", tags=["posts"])

settings = get_settings()


@router.get("", response_model=PostPage)
async def get_feed(
    page: int = Query(0, ge=0),
    size: int = Query(settings.FEED_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    service: PostService = Depends(get_post_service),
):
    return await service.get_published_feed(page=page, size=size)


@router.get("/author/{author_id}", response_model=PostPage)
async def get_posts_by_author(
    author_id: int,
    page: int = Query(0, ge=0),
    size: int = Query(settings.FEED_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    requester: Optional[Requester] = Depends(get_optional_requester),
    service: PostService = Depends(get_post_service),
):
    return await service.get_by_author(author_id, requester, page=page, size=size)


@router.get("/{slug}", response_model=PostRead)
async def get_post(
    slug: str,
    requester: Optional[Requester] = Depends(get_optional_requester),
    service: PostService = Depends(get_post_service),
):
    return await service.get_by_slug(slug, requester)


@router.post("", response_model=PostRead, status_code=status.HTTP_201_CREATED)
async def create_post(
    data: PostCreate,
    requester: Requester = Depends(get_requester),
    service: PostService = Depends(get_post_service),
):
    return await service.create(requester, data)


@router.put("/{post_id}", response_model=PostRead)
async def update_post(
    post_id: uuid.UUID,
    data: PostUpdate,
    requester: Requester = Depends(get_requester),
    service: PostService = Depends(get_post_service),
):
    return await service.update(post_id, requester, data)


@router.delete("/{post_id}")
async def delete_post(
    post_id: uuid.UUID,
    requester: Requester = Depends(get_requester),
    service: PostService = Depends(get_post_service),
):
    await service.delete(post_id, requester)
    return {"message": "Post deleted successfully"}
