"""Customers (patients) and doctors."""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from medbill.core.exceptions import ConflictError, NotFoundError
from medbill.models.customer import Customer
from medbill.models.doctor import Doctor
from medbill.models.invoice import Invoice
from medbill.schemas.customer import CustomerCreate, CustomerUpdate
from medbill.schemas.doctor import DoctorCreate, DoctorUpdate

logger = logging.getLogger(__name__)


def normalize_phone(phone: str) -> str:
    """Collapse whitespace so '98765 43220' and '9876543220' are the same customer."""
    return "".join(phone.split())


# ==============================================================================
# CUSTOMERS
# ==============================================================================

def get_customers(db: Session, search: Optional[str] = None) -> List[Customer]:
    q = db.query(Customer)
    if search:
        pattern = f"%{search.strip()}%"
        q = q.filter(Customer.name.ilike(pattern) | Customer.phone.ilike(pattern))
    return q.order_by(Customer.name).all()


def get_customer(db: Session, customer_id: int) -> Optional[Customer]:
    return db.get(Customer, customer_id)


def get_customer_by_phone(db: Session, phone: str) -> Optional[Customer]:
    return db.query(Customer).filter(Customer.phone == normalize_phone(phone)).first()


def create_customer(db: Session, data: CustomerCreate) -> Customer:
    phone = normalize_phone(data.phone)
    if get_customer_by_phone(db, phone):
        raise ConflictError(f"A customer with phone {phone} already exists")

    customer = Customer(
        name=data.name.strip(),
        phone=phone,
        email=data.email,
        address=data.address,
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def update_customer(db: Session, customer_id: int, updates: CustomerUpdate) -> Customer:
    customer = get_customer(db, customer_id)
    if not customer:
        raise NotFoundError("Customer not found")

    changes = updates.model_dump(exclude_unset=True)
    if "phone" in changes:
        changes["phone"] = normalize_phone(changes["phone"])
        other = get_customer_by_phone(db, changes["phone"])
        if other and other.id != customer.id:
            raise ConflictError(f"A customer with phone {changes['phone']} already exists")
    for field, value in changes.items():
        setattr(customer, field, value)

    db.commit()
    db.refresh(customer)
    return customer


def get_customer_invoices(db: Session, customer_id: int) -> List[Invoice]:
    return (
        db.query(Invoice)
        .filter(Invoice.customer_id == customer_id)
        .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        .all()
    )


# ==============================================================================
# DOCTORS
# ==============================================================================

def get_doctors(db: Session) -> List[Doctor]:
    return db.query(Doctor).order_by(Doctor.name).all()


def get_doctor(db: Session, doctor_id: int) -> Optional[Doctor]:
    return db.get(Doctor, doctor_id)


def create_doctor(db: Session, data: DoctorCreate) -> Doctor:
    doctor = Doctor(name=data.name.strip(), specialization=data.specialization, phone=data.phone)
    db.add(doctor)
    db.commit()
    db.refresh(doctor)
    return doctor


def update_doctor(db: Session, doctor_id: int, updates: DoctorUpdate) -> Doctor:
    doctor = get_doctor(db, doctor_id)
    if not doctor:
        raise NotFoundError("Doctor not found")
    for field, value in updates.model_dump(exclude_unset=True).items():
        setattr(doctor, field, value)
    db.commit()
    db.refresh(doctor)
    return doctor
