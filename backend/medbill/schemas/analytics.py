from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class TopSellingMedicine(BaseModel):
    id: int
    name: str
    category: str
    sold_units: int
    revenue: Decimal


class DailySales(BaseModel):
    date: str  # YYYY-MM-DD
    sales: Decimal
    transactions: int


class DashboardSummary(BaseModel):
    total_revenue: Decimal
    today_revenue: Decimal
    total_invoices: int
    total_customers: int
    total_medicines: int
    low_stock_count: int
    expiring_count: int


class RecentActivity(BaseModel):
    id: int
    invoice_number: str
    customer: Optional[str] = None
    total: Decimal
    items: int
    time: Optional[str] = None
