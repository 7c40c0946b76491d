from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class CustomerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=3, max_length=32)
    email: Optional[str] = None
    address: Optional[str] = None


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    phone: Optional[str] = Field(default=None, min_length=3, max_length=32)
    email: Optional[str] = None
    address: Optional[str] = None

    @field_validator("name", "phone")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("must not be null")
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class CustomerResponse(BaseModel):
    id: int
    name: str
    phone: str
    email: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
