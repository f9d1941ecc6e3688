# rural_health/routers/vaccinations.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from .. import crud, schemas, security, models
from ..database import get_db

router = APIRouter(
    prefix="/vaccinations",
    tags=["Vaccinations"],
    dependencies=[Depends(security.get_current_user)],
    responses={404: {"description": "Not found"}},
)

@router.get("", response_model=List[schemas.VaccinationDetail])
def read_all_vaccinations(db: Session = Depends(get_db)):
    return crud.get_vaccinations(db)

@router.get("/stats", response_model=schemas.VaccinationStats)
def read_vaccination_stats(db: Session = Depends(get_db)):
    return crud.get_vaccination_stats(db)

@router.post("", response_model=schemas.VaccinationResponse, status_code=status.HTTP_201_CREATED)
def create_new_vaccination(
    vaccination: schemas.VaccinationCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(security.get_current_user)
):
    if crud.get_patient(db, vaccination.patient_id) is None:
        raise HTTPException(status_code=404, detail="Patient not found")
    if crud.get_vaccine(db, vaccination.vaccine_id) is None:
        raise HTTPException(status_code=404, detail="Vaccine not found")
    return crud.create_vaccination(db, vaccination, administered_by=current_user.id)

@router.put("/{vaccination_id}", response_model=schemas.VaccinationResponse)
def update_existing_vaccination(
    vaccination_id: int,
    vaccination_update: schemas.VaccinationUpdate,
    db: Session = Depends(get_db)
):
    """Partial update; marking a dose completed stamps today's date if none is given."""
    updated = crud.update_vaccination(db, vaccination_id, vaccination_update)
    if not updated:
        raise HTTPException(status_code=404, detail="Vaccination not found")
    return updated
