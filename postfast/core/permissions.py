# postfast/core/permissions.py
import enum
from dataclasses import dataclass


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Requester:
    """Identity attached to a request by the auth layer."""
    id: int
    role: Role = Role.USER


def can_modify(requester_role: Role | None, requester_id: int | None, owner_id: int) -> bool:
    """Owner or administrator."""
    if requester_id is None:
        return False
    return requester_role is Role.ADMIN or requester_id == owner_id


def requester_can_modify(requester: Requester | None, owner_id: int, check=can_modify) -> bool:
    if requester is None:
        return False
    return check(requester.role, requester.id, owner_id)
