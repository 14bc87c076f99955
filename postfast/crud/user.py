# postfast/crud/user.py
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from postfast.core.permissions import Role
from postfast.models.user import User


class CRUDUser:
    async def get_by_id(self, db: AsyncSession, user_id: int) -> Optional[User]:
        q = select(User).where(User.id == user_id)
        res = await db.execute(q)
        return res.scalars().first()

    async def create(self, db: AsyncSession, email: str, username: str, role: Role = Role.USER) -> User:
        user = User(email=email, username=username, role=role)
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

user = CRUDUser()
