# postfast/models/post.py
import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship
from postfast.database import Base, utcnow
from postfast.models.user import User


class PostStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    PUBLISHED = "PUBLISHED"


class Post(Base):
    __tablename__ = "posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    body = Column(Text, nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    status = Column(Enum(PostStatus, name="post_status"), nullable=False, default=PostStatus.DRAFT, index=True)

    # kept after promotion as history
    scheduled_at = Column(DateTime, nullable=True)
    published_at = Column(DateTime, nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # joined so a freshly refreshed post can be serialized without another await
    author = relationship(User, lazy="joined")

    @property
    def is_published(self) -> bool:
        return self.status is PostStatus.PUBLISHED
