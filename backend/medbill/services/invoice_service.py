"""Invoice creation and lookup. Totals are always recomputed server-side through the cart."""
import logging
import secrets
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from medbill.core.exceptions import ConflictError, InvalidReferenceError
from medbill.models.invoice import Invoice, InvoiceItem
from medbill.schemas.invoice import InvoiceCreate, InvoiceItemCreate
from medbill.services import catalog_service, customer_service
from medbill.services.cart import Cart

logger = logging.getLogger(__name__)

INVOICE_NUMBER_ATTEMPTS = 20
INVOICE_WRITE_ATTEMPTS = 3


def get_invoices(db: Session, limit: Optional[int] = None) -> List[Invoice]:
    q = db.query(Invoice).order_by(Invoice.created_at.desc(), Invoice.id.desc())
    if limit:
        q = q.limit(limit)
    return q.all()


def get_invoice(db: Session, invoice_id: int) -> Optional[Invoice]:
    return db.get(Invoice, invoice_id)


def get_invoice_by_number(db: Session, invoice_number: str) -> Optional[Invoice]:
    return db.query(Invoice).filter(Invoice.invoice_number == invoice_number).first()


def get_invoice_items(db: Session, invoice_id: int) -> List[InvoiceItem]:
    return db.query(InvoiceItem).filter(InvoiceItem.invoice_id == invoice_id).order_by(InvoiceItem.id).all()


def generate_invoice_number(db: Session, now: Optional[datetime] = None) -> str:
    """INV-YYYYMMDD-NNNN, retried until it does not collide with an existing invoice."""
    date_str = (now or datetime.now(timezone.utc)).strftime("%Y%m%d")
    for _ in range(INVOICE_NUMBER_ATTEMPTS):
        candidate = f"INV-{date_str}-{secrets.randbelow(10000):04d}"
        if not get_invoice_by_number(db, candidate):
            return candidate
    raise ConflictError("Could not allocate a unique invoice number, please retry")


def build_cart(db: Session, items: List[InvoiceItemCreate]) -> Cart:
    """
    Load every referenced medicine and price the lines.

    Raises:
        InvalidReferenceError: an item points at a medicine that does not exist
        InsufficientStockError: requested quantity exceeds stock
    """
    cart = Cart()
    for item in items:
        medicine = catalog_service.get_medicine(db, item.medicine_id)
        if not medicine:
            raise InvalidReferenceError(f"Medicine {item.medicine_id} does not exist")
        cart.add(medicine, item.quantity, unit_price=item.unit_price, gst_rate=item.gst_rate)
    return cart


def _write_invoice(db: Session, user_id: int, data: InvoiceCreate, cart: Cart) -> Invoice:
    invoice = Invoice(
        invoice_number=generate_invoice_number(db),
        customer_id=data.customer_id,
        doctor_id=data.doctor_id,
        subtotal=cart.subtotal,
        gst_amount=cart.gst_amount,
        total=cart.total,
        user_id=user_id,
    )
    db.add(invoice)
    db.flush()  # Get ID without committing

    for line in cart.items:
        db.add(InvoiceItem(
            invoice_id=invoice.id,
            medicine_id=line.medicine_id,
            quantity=line.quantity,
            unit_price=line.unit_price,
            gst_rate=line.gst_rate,
            gst_amount=line.gst_amount,
            total_price=line.total_price,
        ))
        catalog_service.decrement_stock(line.medicine, line.quantity)

    db.commit()
    return invoice


def create_invoice(db: Session, user_id: int, data: InvoiceCreate) -> Invoice:
    """
    Persist an invoice with its line items and take the sold units out of stock.

    Everything is validated before the first write, and the invoice, its items
    and the stock changes go out in a single commit. A concurrent sale that
    takes the same invoice number rolls the attempt back and it is retried
    with a fresh number and freshly loaded stock.

    Raises:
        InvalidReferenceError: unknown customer, doctor or medicine
        InsufficientStockError: a line asks for more than is in stock
        ConflictError: no attempt could be committed
    """
    if data.customer_id is not None and not customer_service.get_customer(db, data.customer_id):
        raise InvalidReferenceError(f"Customer {data.customer_id} does not exist")
    if data.doctor_id is not None and not customer_service.get_doctor(db, data.doctor_id):
        raise InvalidReferenceError(f"Doctor {data.doctor_id} does not exist")

    for attempt in range(1, INVOICE_WRITE_ATTEMPTS + 1):
        cart = build_cart(db, data.items)
        try:
            invoice = _write_invoice(db, user_id, data, cart)
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"[INVOICE] Write attempt {attempt} by user {user_id} hit a constraint: {e.orig}")
            continue
        except Exception:
            db.rollback()
            raise

        db.refresh(invoice)
        logger.info(
            f"[INVOICE] Created {invoice.invoice_number} by user {user_id}: "
            f"{len(cart.items)} lines, subtotal={invoice.subtotal}, gst={invoice.gst_amount}, total={invoice.total}"
        )
        return invoice

    raise ConflictError("Invoice could not be saved because of a concurrent update, please retry")
