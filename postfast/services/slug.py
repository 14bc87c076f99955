# postfast/services/slug.py
"""
URL slug derivation.

``slugify`` is pure; ``SlugGenerator`` resolves collisions against the post
store by appending ``-1``, ``-2``, ... to the candidate.
"""

import logging
import re
import unicodedata
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from postfast.core.exceptions import SlugGenerationError
from postfast.crud.post import post as post_store

logger = logging.getLogger(__name__)

WHITESPACE = re.compile(r"\s")
NON_WORD = re.compile(r"[^\w-]", re.ASCII)
HYPHENS = re.compile(r"-+")
DEFAULT_MAX_ATTEMPTS = 10_000


def slugify(title: str) -> str:
    """Lowercase ASCII slug for ``title``; may be empty for e.g. all-symbol titles."""
    slug = unicodedata.normalize("NFD", title)
    slug = WHITESPACE.sub("-", slug)
    slug = NON_WORD.sub("", slug)
    slug = HYPHENS.sub("-", slug.lower())
    return slug.strip("-")


def fallback_slug(post_id: uuid.UUID) -> str:
    return f"post-{post_id.hex[:8]}"


class SlugGenerator:
    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS, store=post_store):
        self.max_attempts = max_attempts
        self.store = store

    async def generate(
        self,
        db: AsyncSession,
        title: str,
        post_id: uuid.UUID,
        exclude_id: uuid.UUID | None = None,
    ) -> str:
        """
        Return an unused slug for ``title``.

        ``post_id`` seeds the fallback when the title has no slug-able
        characters. ``exclude_id`` ignores that post's own current slug.
        """
        base = slugify(title) or fallback_slug(post_id)

        slug = base
        for counter in range(1, self.max_attempts + 1):
            if not await self.store.exists_by_slug(db, slug, exclude_id=exclude_id):
                return slug
            slug = f"{base}-{counter}"

        logger.error("Slug space exhausted for base %r after %d attempts", base, self.max_attempts)
        raise SlugGenerationError(f"Could not find a free slug for '{base}'")
