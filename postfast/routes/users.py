# postfast/routes/users.py
from fastapi import APIRouter, Depends
from postfast.core.deps import get_current_user
from postfast.schemas.user import UserRead

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/me", response_model=UserRead)
async def read_users_me(current_user = Depends(get_current_user)):
    return current_user
