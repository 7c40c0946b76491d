"""Prescribing doctors."""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from medbill.api.deps import get_db, get_current_user
from medbill.core.exceptions import BusinessError
from medbill.models.user import User
from medbill.schemas.doctor import DoctorCreate, DoctorResponse, DoctorUpdate
from medbill.services import customer_service

router = APIRouter()


@router.get("", response_model=List[DoctorResponse])
def list_doctors(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return customer_service.get_doctors(db)


@router.get("/{doctor_id}", response_model=DoctorResponse)
def get_doctor(doctor_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    doctor = customer_service.get_doctor(db, doctor_id)
    if not doctor:
        raise BusinessError.not_found("Doctor")
    return doctor


@router.post("", response_model=DoctorResponse, status_code=201)
def create_doctor(data: DoctorCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return customer_service.create_doctor(db, data)


@router.patch("/{doctor_id}", response_model=DoctorResponse)
def update_doctor(
    doctor_id: int,
    updates: DoctorUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return customer_service.update_doctor(db, doctor_id, updates)
