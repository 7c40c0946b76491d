"""Medicine inventory: catalogue, stock levels and alerts."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from medbill.api.deps import get_db, get_current_user
from medbill.core.audit import AuditLog
from medbill.core.config import settings
from medbill.core.exceptions import BusinessError
from medbill.models.user import User
from medbill.schemas.medicine import MedicineCreate, MedicineResponse, MedicineUpdate, StockUpdate
from medbill.services import catalog_service

router = APIRouter()


@router.get("", response_model=List[MedicineResponse])
def list_medicines(
    search: Optional[str] = Query(None, description="Match on name or description"),
    category_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    """Medicine list for the POS grid, with search and category filter."""
    return catalog_service.get_medicines(db, search=search, category_id=category_id)


# ==============================================================================
# ALERTS (declared before /{medicine_id} so the paths are not shadowed)
# ==============================================================================

@router.get("/low-stock", response_model=List[MedicineResponse])
def low_stock(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Medicines at or below their low-stock threshold."""
    return catalog_service.get_low_stock_medicines(db)


@router.get("/expiring", response_model=List[MedicineResponse])
def expiring(
    days: int = Query(settings.EXPIRY_ALERT_DAYS, ge=0, description="Alert for items expiring within N days"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return catalog_service.get_expiring_medicines(db, days)


# ==============================================================================
# CRUD
# ==============================================================================

@router.get("/{medicine_id}", response_model=MedicineResponse)
def get_medicine(medicine_id: int, db: Session = Depends(get_db)):
    medicine = catalog_service.get_medicine(db, medicine_id)
    if not medicine:
        raise BusinessError.not_found("Medicine")
    return medicine


@router.post("", response_model=MedicineResponse, status_code=201)
def create_medicine(
    data: MedicineCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    medicine = catalog_service.create_medicine(db, data)
    AuditLog.log_action("create", "medicine", medicine.id, current_user.id, changes={"name": medicine.name, "stock": medicine.stock})
    return medicine


@router.patch("/{medicine_id}", response_model=MedicineResponse)
def update_medicine(
    medicine_id: int,
    updates: MedicineUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    medicine = catalog_service.update_medicine(db, medicine_id, updates)
    AuditLog.log_action("update", "medicine", medicine.id, current_user.id, changes=updates.model_dump(exclude_unset=True))
    return medicine


@router.patch("/{medicine_id}/stock", response_model=MedicineResponse)
def update_stock(
    medicine_id: int,
    data: StockUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    medicine = catalog_service.update_medicine_stock(db, medicine_id, data.stock)
    if not medicine:
        raise BusinessError.not_found("Medicine")
    AuditLog.log_action("update", "medicine", medicine.id, current_user.id, changes={"stock": data.stock})
    return medicine


@router.delete("/{medicine_id}")
def delete_medicine(
    medicine_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    name = catalog_service.delete_medicine(db, medicine_id)
    AuditLog.log_action("delete", "medicine", medicine_id, current_user.id, changes={"name": name})
    return {"message": f"Deleted {name}", "id": medicine_id}
