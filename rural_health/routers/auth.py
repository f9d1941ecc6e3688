# rural_health/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from .. import crud, schemas, security, models
from ..config import get_settings
from ..database import get_db

import logging

logger = logging.getLogger(__name__)


router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)

def _authenticate(db: Session, username: str, password: str) -> models.User:
    user = crud.get_user_by_username(db, username)
    if not user or not user.is_active or not security.verify_password(password, user.password_hash):
        logger.warning(f"Failed login attempt for username: {username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.info(f"User '{user.username}' successfully authenticated.")
    return user

def _auth_response(user: models.User) -> dict:
    return {
        "user": user,
        "access_token": security.token_for_user(user),
        "token_type": "bearer",
        "expires_in": get_settings().access_token_expire_minutes * 60,
    }

@router.get("/setup", response_model=schemas.SetupStatus)
def read_setup_status(db: Session = Depends(get_db)):
    """Whether the system still needs its first (admin) account."""
    return {"needs_setup": crud.count_users(db) == 0}

@router.post("/signup", response_model=schemas.AuthResponse)
def signup(payload: schemas.SignupRequest, db: Session = Depends(get_db)):
    """
    Register an account. The very first account on an empty system becomes
    the admin; everyone after that is a health worker.
    """
    if crud.get_user_by_username(db, payload.username):
        raise HTTPException(status_code=400, detail="Username already exists")

    # is_first_user is only a hint from the setup screen; it cannot promote
    # anyone once an account exists.
    role = models.UserRole.admin if crud.count_users(db) == 0 else models.UserRole.health_worker
    user = crud.create_user(db, schemas.UserCreate(
        **payload.model_dump(exclude={"is_first_user"}),
        role=role,
        is_active=True,
    ))
    logger.info(f"New {role.value} account signed up: {user.username}")
    return _auth_response(user)

@router.post("/login", response_model=schemas.AuthResponse)
def login(payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    user = _authenticate(db, payload.username, payload.password)
    return _auth_response(user)

@router.post("/token", response_model=schemas.TokenResponse)
def login_for_access_token(db: Session = Depends(get_db), form_data: OAuth2PasswordRequestForm = Depends()):
    user = _authenticate(db, form_data.username, form_data.password)
    response = _auth_response(user)
    response.pop("user")
    return response

@router.post("/logout", response_model=schemas.MessageResponse)
def logout(current_user: models.User = Depends(security.get_current_user)):
    # Tokens are stateless; the client discards its copy
    logger.info(f"User '{current_user.username}' logged out.")
    return {"message": "Logged out successfully"}

@router.get("/user", response_model=schemas.UserResponse)
def read_current_user(current_user: models.User = Depends(security.get_current_user)):
    """
    Get the current logged in user's details.
    """
    return current_user
