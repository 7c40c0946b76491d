from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Date, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from medbill.db.base import Base


class Medicine(Base):
    """
    A stocked medicine batch.

    stock is a unit count and never goes below zero; the service layer checks
    it before every decrement. gst_rate is a percentage (18 = 18%).
    """
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    form = Column(String(64), nullable=False)  # tablet, capsule, syrup, ...
    batch_number = Column(String(64), nullable=False)
    expiry_date = Column(Date, nullable=False)
    mrp = Column(Numeric(10, 2), nullable=False)  # price per unit
    stock = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False, default=10)
    gst_rate = Column(Numeric(5, 2), nullable=False, default=18)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    category = relationship("Category", backref="medicines")
