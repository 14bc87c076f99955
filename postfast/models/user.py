# postfast/models/user.py
from sqlalchemy import Column, Integer, String, Boolean, Enum
from postfast.core.permissions import Role
from postfast.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(50), unique=True, nullable=False)
    role = Column(Enum(Role, name="user_role"), nullable=False, default=Role.USER)
    is_active = Column(Boolean(), default=True)
