from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from medbill.db.base import Base


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(32), unique=True, nullable=False, index=True)  # INV-YYYYMMDD-NNNN
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)  # walk-in sales have none
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=True)
    subtotal = Column(Numeric(12, 2), nullable=False)  # before tax
    gst_amount = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)  # subtotal + GST
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    customer = relationship("Customer", backref="invoices")
    doctor = relationship("Doctor")
    user = relationship("User")
    items = relationship("InvoiceItem", back_populates="invoice", order_by="InvoiceItem.id")


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    gst_rate = Column(Numeric(5, 2), nullable=False)
    gst_amount = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)  # unit_price * quantity + gst_amount

    invoice = relationship("Invoice", back_populates="items")
    medicine = relationship("Medicine")
