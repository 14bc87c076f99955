# postfast/schemas/user.py
from pydantic import BaseModel, EmailStr

from postfast.core.permissions import Role

class UserBase(BaseModel):
    email: EmailStr
    username: str


class UserRead(UserBase):
    id: int
    role: Role
    is_active: bool

    model_config = {"from_attributes": True}

class TokenData(BaseModel):
    sub: str | None = None
