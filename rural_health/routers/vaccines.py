from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from .. import crud, schemas, security
from ..database import get_db

router = APIRouter(
    prefix="/vaccines",
    tags=["Vaccines"],
    dependencies=[Depends(security.get_current_user)],
    responses={404: {"description": "Not found"}},
)

@router.get("", response_model=List[schemas.VaccineResponse])
def read_active_vaccines(db: Session = Depends(get_db)):
    return crud.get_vaccines(db)

@router.post("", response_model=schemas.VaccineResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(security.require_admin)])
def create_new_vaccine(vaccine: schemas.VaccineCreate, db: Session = Depends(get_db)):
    return crud.create_vaccine(db, vaccine)
