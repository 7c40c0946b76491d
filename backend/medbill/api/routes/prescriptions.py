"""Prescriptions: JSON records and image uploads."""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from medbill.api.deps import get_db, get_current_user
from medbill.core.audit import AuditLog
from medbill.core.config import settings
from medbill.core.exceptions import BusinessError
from medbill.models.user import User
from medbill.schemas.prescription import PrescriptionCreate, PrescriptionResponse
from medbill.services import prescription_service, upload_service

router = APIRouter()


@router.post("", response_model=PrescriptionResponse, status_code=201)
def create_prescription(
    data: PrescriptionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    prescription = prescription_service.create_prescription(db, data)
    AuditLog.log_action("create", "prescription", prescription.id, current_user.id)
    return prescription


@router.post("/upload", response_model=PrescriptionResponse, status_code=201)
async def upload_prescription(
    customer_id: int = Form(...),
    doctor_id: Optional[int] = Form(None),
    notes: Optional[str] = Form(None),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Store a prescription image (JPEG/PNG/GIF, size-limited) and record it against the customer."""
    # One extra byte is enough to tell an oversized file apart
    content = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    public_path = upload_service.save_prescription_image(content, file.content_type, file.filename or "")

    try:
        prescription = prescription_service.create_prescription(
            db,
            PrescriptionCreate(
                customer_id=customer_id,
                doctor_id=doctor_id,
                prescription_image_path=public_path,
                notes=notes,
            ),
        )
    except Exception:
        upload_service.discard(public_path)
        raise
    AuditLog.log_action("create", "prescription", prescription.id, current_user.id, changes={"image": public_path})
    return prescription


@router.get("/{prescription_id}", response_model=PrescriptionResponse)
def get_prescription(prescription_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    prescription = prescription_service.get_prescription(db, prescription_id)
    if not prescription:
        raise BusinessError.not_found("Prescription")
    return prescription


@router.get("/{prescription_id}/image")
def get_prescription_image(prescription_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    prescription = prescription_service.get_prescription(db, prescription_id)
    if not prescription or not prescription.prescription_image_path:
        raise BusinessError.not_found("Prescription image")
    return FileResponse(upload_service.resolve_public_path(prescription.prescription_image_path))
