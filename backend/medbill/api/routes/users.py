"""User management. Admin only."""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from medbill.api.deps import get_db, require_role
from medbill.core.audit import AuditLog
from medbill.models.user import User
from medbill.schemas.user import UserCreate, UserResponse
from medbill.services import user_service

router = APIRouter()


@router.get("", response_model=List[UserResponse])
def list_users(db: Session = Depends(get_db), admin: User = Depends(require_role("admin"))):
    return user_service.list_users(db)


@router.post("", response_model=UserResponse, status_code=201)
def create_user(data: UserCreate, db: Session = Depends(get_db), admin: User = Depends(require_role("admin"))):
    user = user_service.create_user(db, data)
    AuditLog.log_action("create", "user", user.id, admin.id, changes={"username": user.username, "role": user.role})
    return user
