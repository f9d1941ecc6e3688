# rural_health/routers/patients.py
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional

import logging

from .. import crud, schemas, security, models
from ..database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Patients"],
    dependencies=[Depends(security.get_current_user)],
    responses={404: {"description": "Not found"}},
)

def _get_patient_or_404(db: Session, patient_id: int) -> models.Patient:
    patient = crud.get_patient(db, patient_id=patient_id)
    if patient is None:
        raise HTTPException(status_code=404, detail="Patient not found")
    return patient

@router.get("/patients", response_model=List[schemas.PatientResponse])
def read_all_patients(
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    return crud.get_patients(db, limit=limit, offset=offset)

@router.get("/patients/search", response_model=List[schemas.PatientResponse])
def search_patients(q: Optional[str] = None, db: Session = Depends(get_db)):
    """Search by name, phone or patient ID (at most 20 matches)."""
    if not q:
        raise HTTPException(status_code=400, detail="Search query is required")
    return crud.search_patients(db, q)

@router.get("/patients/qr/{qr_code}", response_model=schemas.PatientResponse)
def read_patient_by_qr_code(qr_code: str, db: Session = Depends(get_db)):
    patient = crud.get_patient_by_qr_code(db, qr_code)
    if patient is None:
        raise HTTPException(status_code=404, detail="Patient not found")
    return patient

@router.get("/patients/by-patient-id/{patient_id}", response_model=schemas.PatientResponse)
def read_patient_by_patient_id(patient_id: str, db: Session = Depends(get_db)):
    patient = crud.get_patient_by_patient_id(db, patient_id)
    if patient is None:
        raise HTTPException(status_code=404, detail="Patient not found")
    return patient

@router.post("/patients", response_model=schemas.PatientResponse, status_code=status.HTTP_201_CREATED)
def create_new_patient(
    patient: schemas.PatientCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(security.get_current_user)
):
    """
    Register a patient. The RH patient ID and QR payload are generated.
    """
    return crud.create_patient(db=db, patient=patient, created_by=current_user.id)

@router.get("/patients/{patient_id}", response_model=schemas.PatientResponse)
def read_patient_details(patient_id: int, db: Session = Depends(get_db)):
    return _get_patient_or_404(db, patient_id)

@router.put("/patients/{patient_id}", response_model=schemas.PatientResponse)
def update_patient_details(
    patient_id: int,
    payload: schemas.PatientUpdate,
    db: Session = Depends(get_db)
):
    updated = crud.update_patient(db, patient_id, payload)
    if not updated:
        raise HTTPException(status_code=404, detail="Patient not found")
    return updated

@router.get("/patients/{patient_id}/qr.png", response_class=Response)
def read_patient_qr_image(patient_id: int, db: Session = Depends(get_db)):
    """PNG of the patient's QR code, for printing on the vaccination card."""
    patient = _get_patient_or_404(db, patient_id)
    return Response(
        content=security.qr_code_png(patient.qr_code),
        media_type="image/png",
        headers={"Content-Disposition": f'inline; filename="{patient.patient_id}.png"'},
    )

@router.get("/patients/{patient_id}/vaccinations", response_model=List[schemas.VaccinationResponse])
def read_patient_vaccinations(patient_id: int, db: Session = Depends(get_db)):
    return crud.get_vaccinations_by_patient(db, patient_id)

@router.get("/patients/{patient_id}/appointments", response_model=List[schemas.AppointmentResponse])
def read_patient_appointments(patient_id: int, db: Session = Depends(get_db)):
    return crud.get_appointments_by_patient(db, patient_id)
