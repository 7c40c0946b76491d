"""Medicine categories. Listing is public so the POS screen can build its filter."""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from medbill.api.deps import get_db, get_current_user
from medbill.models.user import User
from medbill.schemas.category import CategoryCreate, CategoryResponse
from medbill.services import catalog_service

router = APIRouter()


@router.get("", response_model=List[CategoryResponse])
def list_categories(db: Session = Depends(get_db)):
    return catalog_service.get_categories(db)


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(
    data: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return catalog_service.create_category(db, data)
