"""
Dashboard and report aggregates.

Provides:
- Top-selling medicines (aggregate quantity over invoice items)
- Daily sales for the last N days, zero-filled
- Summary card numbers
- Recent invoice activity
"""
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from medbill.core.config import settings
from medbill.models.category import Category
from medbill.models.customer import Customer
from medbill.models.invoice import Invoice, InvoiceItem
from medbill.models.medicine import Medicine


def _today() -> date:
    return datetime.now(timezone.utc).date()


def get_top_selling_medicines(db: Session, limit: int = 5) -> List[dict]:
    """
    Medicines ranked by total units sold.
    Returns: [{id, name, category, sold_units, revenue}, ...]
    """
    sold_units = func.sum(InvoiceItem.quantity).label("sold_units")
    revenue = func.sum(InvoiceItem.unit_price * InvoiceItem.quantity).label("revenue")

    rows = (
        db.query(Medicine.id, Medicine.name, Category.name.label("category"), sold_units, revenue)
        .join(InvoiceItem, InvoiceItem.medicine_id == Medicine.id)
        .outerjoin(Category, Category.id == Medicine.category_id)
        .group_by(Medicine.id, Medicine.name, Category.name)
        .order_by(sold_units.desc(), Medicine.name)
        .limit(limit)
        .all()
    )

    return [
        {
            "id": r.id,
            "name": r.name,
            "category": r.category or "Unknown",
            "sold_units": int(r.sold_units or 0),
            "revenue": Decimal(str(r.revenue or 0)).quantize(Decimal("0.01")),
        }
        for r in rows
    ]


def get_daily_sales(db: Session, days: int = 7, today: Optional[date] = None) -> List[dict]:
    """
    Invoice totals per day for the last `days` days, oldest first.
    Days without sales are present with zeros.
    Returns: [{date: "2024-05-01", sales: 1500.00, transactions: 5}, ...]
    """
    end_date = today or _today()
    start_date = end_date - timedelta(days=days - 1)

    day = func.date(Invoice.created_at)
    results = (
        db.query(
            day.label("date"),
            func.sum(Invoice.total).label("sales"),
            func.count(Invoice.id).label("transactions"),
        )
        .filter(day >= start_date, day <= end_date)
        .group_by(day)
        .all()
    )

    # Keyed by ISO date string; SQLite returns strings, PostgreSQL returns dates
    data_dict = {str(r.date): r for r in results}

    daily_data = []
    for i in range(days):
        d = start_date + timedelta(days=i)
        row = data_dict.get(d.isoformat())
        daily_data.append({
            "date": d.isoformat(),
            "sales": Decimal(str(row.sales)).quantize(Decimal("0.01")) if row else Decimal("0.00"),
            "transactions": int(row.transactions) if row else 0,
        })
    return daily_data


def get_dashboard_summary(db: Session) -> dict:
    """Numbers for the dashboard stat cards."""
    today = _today()

    total_revenue = db.query(func.sum(Invoice.total)).scalar() or Decimal("0")
    today_revenue = db.query(func.sum(Invoice.total)).filter(
        func.date(Invoice.created_at) == today
    ).scalar() or Decimal("0")

    low_stock_count = db.query(func.count(Medicine.id)).filter(
        Medicine.stock <= Medicine.low_stock_threshold
    ).scalar() or 0
    expiring_count = db.query(func.count(Medicine.id)).filter(
        Medicine.expiry_date <= today + timedelta(days=settings.EXPIRY_ALERT_DAYS)
    ).scalar() or 0

    return {
        "total_revenue": Decimal(str(total_revenue)).quantize(Decimal("0.01")),
        "today_revenue": Decimal(str(today_revenue)).quantize(Decimal("0.01")),
        "total_invoices": db.query(func.count(Invoice.id)).scalar() or 0,
        "total_customers": db.query(func.count(Customer.id)).scalar() or 0,
        "total_medicines": db.query(func.count(Medicine.id)).scalar() or 0,
        "low_stock_count": low_stock_count,
        "expiring_count": expiring_count,
    }


def get_recent_activity(db: Session, limit: int = 10) -> List[dict]:
    """Latest invoices for the activity feed."""
    item_count = (
        db.query(InvoiceItem.invoice_id, func.count(InvoiceItem.id).label("items"))
        .group_by(InvoiceItem.invoice_id)
        .subquery()
    )
    rows = (
        db.query(Invoice, Customer.name, item_count.c["items"])
        .outerjoin(Customer, Invoice.customer_id == Customer.id)
        .outerjoin(item_count, item_count.c.invoice_id == Invoice.id)
        .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        .limit(limit)
        .all()
    )
    return [
        {
            "id": inv.id,
            "invoice_number": inv.invoice_number,
            "customer": customer_name or "Walk-in",
            "total": inv.total,
            "items": items or 0,
            "time": inv.created_at.isoformat() if inv.created_at else None,
        }
        for inv, customer_name, items in rows
    ]
