from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class PrescriptionCreate(BaseModel):
    customer_id: int
    doctor_id: Optional[int] = None
    prescription_image_path: Optional[str] = None
    notes: Optional[str] = None


class PrescriptionResponse(BaseModel):
    id: int
    customer_id: int
    doctor_id: Optional[int] = None
    prescription_image_path: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
