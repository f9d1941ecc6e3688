# rural_health/routers/users.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

import logging

from .. import crud, schemas, security, models
from ..database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Users"],
    dependencies=[Depends(security.require_admin)],
    responses={404: {"description": "Not found"}},
)

@router.post("/users", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def create_new_user(
    user: schemas.UserCreate,
    db: Session = Depends(get_db),
    current_admin: models.User = Depends(security.require_admin)
):
    if crud.get_user_by_username(db, username=user.username):
        raise HTTPException(status_code=400, detail="Username already exists")

    new_user = crud.create_user(db=db, user=user)
    logger.info(f"Admin {current_admin.username} created user {new_user.username} ({new_user.role.value})")
    return new_user

@router.get("/users", response_model=List[schemas.UserResponse])
def read_all_users(db: Session = Depends(get_db)):
    return crud.get_users(db)

@router.put("/users/{user_id}", response_model=schemas.UserResponse)
def update_existing_user(
    user_id: int,
    user_update: schemas.UserUpdate,
    db: Session = Depends(get_db),
    current_admin: models.User = Depends(security.require_admin)
):
    updated_user = crud.update_user(db, user_id=user_id, user_update=user_update)
    if not updated_user:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info(f"Admin {current_admin.username} updated user {updated_user.username}")
    return updated_user
