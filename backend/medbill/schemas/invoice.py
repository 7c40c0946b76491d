from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class InvoiceItemCreate(BaseModel):
    """One cart line. Price and GST rate default to the medicine's MRP and rate."""
    medicine_id: int
    quantity: int = Field(gt=0)
    unit_price: Optional[Decimal] = Field(default=None, ge=0)
    gst_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)


class InvoiceCreate(BaseModel):
    customer_id: Optional[int] = None
    doctor_id: Optional[int] = None
    items: List[InvoiceItemCreate] = Field(min_length=1)


class CartQuoteRequest(BaseModel):
    items: List[InvoiceItemCreate] = Field(min_length=1)


class InvoiceItemResponse(BaseModel):
    id: int
    invoice_id: int
    medicine_id: int
    quantity: int
    unit_price: Decimal
    gst_rate: Decimal
    gst_amount: Decimal
    total_price: Decimal

    class Config:
        from_attributes = True


class InvoiceResponse(BaseModel):
    id: int
    invoice_number: str
    customer_id: Optional[int] = None
    doctor_id: Optional[int] = None
    subtotal: Decimal
    gst_amount: Decimal
    total: Decimal
    user_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InvoiceDetail(BaseModel):
    invoice: InvoiceResponse
    items: List[InvoiceItemResponse]


class CartLineResponse(BaseModel):
    medicine_id: int
    name: str
    quantity: int
    unit_price: Decimal
    gst_rate: Decimal
    gst_amount: Decimal
    total_price: Decimal


class CartQuoteResponse(BaseModel):
    items: List[CartLineResponse]
    subtotal: Decimal
    gst_amount: Decimal
    total: Decimal
