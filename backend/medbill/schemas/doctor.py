from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class DoctorCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    specialization: Optional[str] = None
    phone: Optional[str] = None


class DoctorUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    specialization: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("name")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("must not be null")
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class DoctorResponse(BaseModel):
    id: int
    name: str
    specialization: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
