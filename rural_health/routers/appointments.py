# rural_health/routers/appointments.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from .. import crud, schemas, security, models
from ..database import get_db

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
    dependencies=[Depends(security.get_current_user)],
    responses={404: {"description": "Not found"}},
)

@router.get("/today", response_model=List[schemas.AppointmentResponse])
def read_today_appointments(db: Session = Depends(get_db)):
    return crud.get_today_appointments(db)

@router.get("", response_model=List[schemas.AppointmentResponse])
def read_appointments_by_date(date: str, db: Session = Depends(get_db)):
    """Appointments on a given day (YYYY-MM-DD), earliest first."""
    try:
        return crud.get_appointments_by_date(db, date)
    except ValueError:
        raise HTTPException(status_code=400, detail="date must be formatted YYYY-MM-DD")

@router.post("", response_model=schemas.AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_new_appointment(
    appointment: schemas.AppointmentCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(security.get_current_user)
):
    if crud.get_patient(db, appointment.patient_id) is None:
        raise HTTPException(status_code=404, detail="Patient not found")
    return crud.create_appointment(db, appointment, created_by=current_user.id)

@router.put("/{appointment_id}", response_model=schemas.AppointmentResponse)
def update_existing_appointment(
    appointment_id: int,
    appointment_update: schemas.AppointmentUpdate,
    db: Session = Depends(get_db)
):
    updated = crud.update_appointment(db, appointment_id, appointment_update)
    if not updated:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return updated
