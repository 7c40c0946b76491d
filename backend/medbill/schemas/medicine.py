from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class MedicineCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: int
    form: str = Field(min_length=1, max_length=64)
    batch_number: str = Field(min_length=1, max_length=64)
    expiry_date: date
    mrp: Decimal = Field(ge=0, decimal_places=2)
    stock: int = Field(ge=0)
    low_stock_threshold: int = Field(default=10, ge=0)
    gst_rate: Decimal = Field(default=Decimal("18"), ge=0, le=100)


class MedicineUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[int] = None
    form: Optional[str] = Field(default=None, min_length=1, max_length=64)
    batch_number: Optional[str] = Field(default=None, min_length=1, max_length=64)
    expiry_date: Optional[date] = None
    mrp: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)
    gst_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)

    @field_validator("name", "form", "batch_number")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("must not be null")
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("category_id", "expiry_date", "mrp", "low_stock_threshold", "gst_rate")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v


class StockUpdate(BaseModel):
    stock: int = Field(ge=0)


class MedicineResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    category_id: int
    form: str
    batch_number: str
    expiry_date: date
    mrp: Decimal
    stock: int
    low_stock_threshold: int
    gst_rate: Decimal
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
