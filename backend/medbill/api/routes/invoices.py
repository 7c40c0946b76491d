"""Invoices (sales) and the POS cart quote."""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from medbill.api.deps import get_db, get_current_user
from medbill.core.audit import AuditLog
from medbill.core.exceptions import BusinessError
from medbill.models.invoice import Invoice
from medbill.models.user import User
from medbill.schemas.invoice import (
    CartQuoteRequest,
    CartQuoteResponse,
    InvoiceCreate,
    InvoiceDetail,
    InvoiceResponse,
)
from medbill.services import invoice_service

router = APIRouter()
cart_router = APIRouter()


def _detail(db: Session, invoice: Invoice) -> dict:
    return {"invoice": invoice, "items": invoice_service.get_invoice_items(db, invoice.id)}


@router.get("", response_model=List[InvoiceResponse])
def list_invoices(
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Invoices, newest first."""
    return invoice_service.get_invoices(db, limit=limit)


@router.get("/number/{invoice_number}", response_model=InvoiceDetail)
def get_invoice_by_number(invoice_number: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    invoice = invoice_service.get_invoice_by_number(db, invoice_number)
    if not invoice:
        raise BusinessError.not_found("Invoice")
    return _detail(db, invoice)


@router.get("/{invoice_id}", response_model=InvoiceDetail)
def get_invoice(invoice_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    invoice = invoice_service.get_invoice(db, invoice_id)
    if not invoice:
        raise BusinessError.not_found("Invoice")
    return _detail(db, invoice)


@router.post("", response_model=InvoiceDetail, status_code=201)
def create_invoice(
    data: InvoiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Bill a cart. Totals are computed here from current prices and GST rates;
    sold units are taken out of stock.
    """
    invoice = invoice_service.create_invoice(db, current_user.id, data)
    AuditLog.log_action(
        "create", "invoice", invoice.id, current_user.id,
        changes={"invoice_number": invoice.invoice_number, "total": str(invoice.total)},
    )
    return _detail(db, invoice)


@cart_router.post("/quote", response_model=CartQuoteResponse)
def quote_cart(data: CartQuoteRequest, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Price a cart without saving anything or touching stock."""
    cart = invoice_service.build_cart(db, data.items)
    return {
        "items": [
            {
                "medicine_id": line.medicine_id,
                "name": line.medicine.name,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "gst_rate": line.gst_rate,
                "gst_amount": line.gst_amount,
                "total_price": line.total_price,
            }
            for line in cart.items
        ],
        "subtotal": cart.subtotal,
        "gst_amount": cart.gst_amount,
        "total": cart.total,
    }
