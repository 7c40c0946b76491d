"""Categories and medicines: lookups, stock changes and inventory alerts."""
import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from medbill.core.exceptions import (
    ConflictError,
    InsufficientStockError,
    InvalidReferenceError,
    NotFoundError,
)
from medbill.models.category import Category
from medbill.models.invoice import InvoiceItem
from medbill.models.medicine import Medicine
from medbill.schemas.category import CategoryCreate
from medbill.schemas.medicine import MedicineCreate, MedicineUpdate

logger = logging.getLogger(__name__)


# ==============================================================================
# CATEGORIES
# ==============================================================================

def get_categories(db: Session) -> List[Category]:
    return db.query(Category).order_by(Category.name).all()


def get_category(db: Session, category_id: int) -> Optional[Category]:
    return db.get(Category, category_id)


def create_category(db: Session, data: CategoryCreate) -> Category:
    name = data.name.strip()
    if db.query(Category).filter(func.lower(Category.name) == name.lower()).first():
        raise ConflictError(f"Category '{name}' already exists")
    category = Category(name=name)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


# ==============================================================================
# MEDICINES
# ==============================================================================

def get_medicines(db: Session, search: Optional[str] = None, category_id: Optional[int] = None) -> List[Medicine]:
    """All medicines, optionally filtered by a name/description search and category."""
    q = db.query(Medicine)
    if search:
        pattern = f"%{search.strip()}%"
        q = q.filter(Medicine.name.ilike(pattern) | Medicine.description.ilike(pattern))
    if category_id is not None:
        q = q.filter(Medicine.category_id == category_id)
    return q.order_by(Medicine.name).all()


def get_medicine(db: Session, medicine_id: int) -> Optional[Medicine]:
    return db.get(Medicine, medicine_id)


def _require_category(db: Session, category_id: int) -> None:
    if not get_category(db, category_id):
        raise InvalidReferenceError(f"Category {category_id} does not exist")


def create_medicine(db: Session, data: MedicineCreate) -> Medicine:
    _require_category(db, data.category_id)
    medicine = Medicine(**data.model_dump())
    medicine.name = medicine.name.strip()
    db.add(medicine)
    db.commit()
    db.refresh(medicine)
    logger.info(f"[INVENTORY] Added medicine {medicine.id} '{medicine.name}' (stock={medicine.stock})")
    return medicine


def update_medicine(db: Session, medicine_id: int, updates: MedicineUpdate) -> Medicine:
    medicine = get_medicine(db, medicine_id)
    if not medicine:
        raise NotFoundError("Medicine not found")

    changes = updates.model_dump(exclude_unset=True)
    if "category_id" in changes:
        _require_category(db, changes["category_id"])
    for field, value in changes.items():
        setattr(medicine, field, value)

    db.commit()
    db.refresh(medicine)
    return medicine


def update_medicine_stock(db: Session, medicine_id: int, new_stock: int) -> Optional[Medicine]:
    """Set absolute stock. Returns None when the medicine does not exist."""
    if new_stock < 0:
        raise InsufficientStockError("Stock cannot be negative")
    medicine = get_medicine(db, medicine_id)
    if not medicine:
        return None
    medicine.stock = new_stock
    db.commit()
    db.refresh(medicine)
    logger.info(f"[INVENTORY] Stock for medicine {medicine.id} set to {new_stock}")
    return medicine


def decrement_stock(medicine: Medicine, quantity: int) -> Medicine:
    """
    Take `quantity` units out of stock. Does not commit; the caller owns the
    transaction (invoice creation decrements every line before one commit).
    """
    if quantity <= 0:
        raise ValueError("Quantity must be positive")
    if medicine.stock < quantity:
        raise InsufficientStockError(
            f"Insufficient stock for {medicine.name}: {medicine.stock} available, {quantity} requested"
        )
    medicine.stock = medicine.stock - quantity
    return medicine


def delete_medicine(db: Session, medicine_id: int) -> str:
    """Delete a medicine that was never sold. Returns its name."""
    medicine = get_medicine(db, medicine_id)
    if not medicine:
        raise NotFoundError("Medicine not found")
    in_use = db.query(InvoiceItem.id).filter(InvoiceItem.medicine_id == medicine_id).first()
    if in_use:
        raise ConflictError(f"Medicine '{medicine.name}' appears on invoices and cannot be deleted")
    name = medicine.name
    db.delete(medicine)
    db.commit()
    logger.info(f"[INVENTORY] Deleted medicine {medicine_id} '{name}'")
    return name


def get_low_stock_medicines(db: Session) -> List[Medicine]:
    """Medicines at or below their own low-stock threshold, emptiest first."""
    return (
        db.query(Medicine)
        .filter(Medicine.stock <= Medicine.low_stock_threshold)
        .order_by(Medicine.stock.asc(), Medicine.name)
        .all()
    )


def get_expiring_medicines(db: Session, days_threshold: int, today: Optional[date] = None) -> List[Medicine]:
    """Medicines expiring within `days_threshold` days. Already expired stock is included."""
    today = today or date.today()
    alert_date = today + timedelta(days=days_threshold)
    return (
        db.query(Medicine)
        .filter(Medicine.expiry_date <= alert_date)
        .order_by(Medicine.expiry_date.asc(), Medicine.name)
        .all()
    )
