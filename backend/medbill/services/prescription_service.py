"""Prescriptions attached to customers, optionally with an uploaded image."""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from medbill.core.exceptions import InvalidReferenceError
from medbill.models.prescription import Prescription
from medbill.schemas.prescription import PrescriptionCreate
from medbill.services import customer_service

logger = logging.getLogger(__name__)


def get_prescriptions(db: Session, customer_id: int) -> List[Prescription]:
    return (
        db.query(Prescription)
        .filter(Prescription.customer_id == customer_id)
        .order_by(Prescription.created_at.desc(), Prescription.id.desc())
        .all()
    )


def get_prescription(db: Session, prescription_id: int) -> Optional[Prescription]:
    return db.get(Prescription, prescription_id)


def create_prescription(db: Session, data: PrescriptionCreate) -> Prescription:
    if not customer_service.get_customer(db, data.customer_id):
        raise InvalidReferenceError(f"Customer {data.customer_id} does not exist")
    if data.doctor_id is not None and not customer_service.get_doctor(db, data.doctor_id):
        raise InvalidReferenceError(f"Doctor {data.doctor_id} does not exist")

    prescription = Prescription(**data.model_dump())
    db.add(prescription)
    db.commit()
    db.refresh(prescription)
    logger.info(
        f"[PRESCRIPTION] Saved prescription {prescription.id} for customer {prescription.customer_id}"
        f"{' with image' if prescription.prescription_image_path else ''}"
    )
    return prescription
