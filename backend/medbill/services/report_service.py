"""CSV exports for the Reports page."""
import csv
import io

from sqlalchemy.orm import Session

from medbill.models.category import Category
from medbill.models.customer import Customer
from medbill.models.invoice import Invoice
from medbill.models.medicine import Medicine


def invoices_csv(db: Session) -> str:
    rows = (
        db.query(Invoice, Customer)
        .outerjoin(Customer, Invoice.customer_id == Customer.id)
        .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        .all()
    )

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["Invoice Number", "Date", "Customer", "Phone", "Subtotal", "GST", "Total"])
    for inv, c in rows:
        writer.writerow([
            inv.invoice_number,
            inv.created_at.strftime("%Y-%m-%d %H:%M") if inv.created_at else "",
            c.name if c else "Walk-in",
            c.phone if c else "",
            inv.subtotal,
            inv.gst_amount,
            inv.total,
        ])
    return output.getvalue()


def inventory_csv(db: Session) -> str:
    rows = (
        db.query(Medicine, Category.name)
        .outerjoin(Category, Medicine.category_id == Category.id)
        .order_by(Medicine.name)
        .all()
    )

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([
        "Medicine Name", "Category", "Form", "Batch", "Expiry Date", "MRP", "GST %", "Stock", "Status",
    ])
    for m, category in rows:
        writer.writerow([
            m.name,
            category or "",
            m.form,
            m.batch_number,
            m.expiry_date.isoformat() if m.expiry_date else "",
            m.mrp,
            m.gst_rate,
            m.stock,
            "Out of Stock" if m.stock == 0 else "Low Stock" if m.stock <= m.low_stock_threshold else "In Stock",
        ])
    return output.getvalue()
