"""Customers (patients) with their invoice and prescription history."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from medbill.api.deps import get_db, get_current_user
from medbill.core.audit import AuditLog
from medbill.core.exceptions import BusinessError
from medbill.models.user import User
from medbill.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from medbill.schemas.invoice import InvoiceResponse
from medbill.schemas.prescription import PrescriptionResponse
from medbill.services import customer_service, prescription_service

router = APIRouter()


@router.get("", response_model=List[CustomerResponse])
def list_customers(
    search: Optional[str] = Query(None, description="Match on name or phone"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return customer_service.get_customers(db, search=search)


@router.get("/phone/{phone}", response_model=CustomerResponse)
def get_customer_by_phone(phone: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """POS lookup by mobile number."""
    customer = customer_service.get_customer_by_phone(db, phone)
    if not customer:
        raise BusinessError.not_found("Customer")
    return customer


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    customer = customer_service.get_customer(db, customer_id)
    if not customer:
        raise BusinessError.not_found("Customer")
    return customer


@router.post("", response_model=CustomerResponse, status_code=201)
def create_customer(
    data: CustomerCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    customer = customer_service.create_customer(db, data)
    AuditLog.log_action("create", "customer", customer.id, current_user.id)
    return customer


@router.patch("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    updates: CustomerUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return customer_service.update_customer(db, customer_id, updates)


@router.get("/{customer_id}/invoices", response_model=List[InvoiceResponse])
def customer_invoices(customer_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    if not customer_service.get_customer(db, customer_id):
        raise BusinessError.not_found("Customer")
    return customer_service.get_customer_invoices(db, customer_id)


@router.get("/{customer_id}/prescriptions", response_model=List[PrescriptionResponse])
def customer_prescriptions(customer_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    if not customer_service.get_customer(db, customer_id):
        raise BusinessError.not_found("Customer")
    return prescription_service.get_prescriptions(db, customer_id)
