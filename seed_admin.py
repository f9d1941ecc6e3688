"""Create the clinic admin account, or restore it if it was demoted or deactivated.

Usage: ADMIN_DEFAULT_PASSWORD=... python seed_admin.py
"""
import os
import logging

from sqlalchemy.orm import Session

from rural_health.core.logging import setup_logging
from rural_health.database import SessionLocal, create_tables
from rural_health import crud, models, schemas

logger = logging.getLogger("seed_admin")


def env_value(name: str, default: str = "", required: bool = False) -> str:
    value = os.getenv(name) or default
    if required and not value:
        raise RuntimeError(f"{name} must be set")
    return value

def upsert_admin(db: Session) -> str:
    """Create the admin account, or restore an existing one to an active admin with the given password."""
    username = env_value("ADMIN_DEFAULT_USERNAME", "admin")
    name = env_value("ADMIN_DEFAULT_NAME", "Clinic Administrator")
    raw_password = env_value("ADMIN_DEFAULT_PASSWORD", required=True)

    user = crud.get_user_by_username(db, username)
    if user:
        crud.update_user(db, user.id, schemas.UserUpdate(
            role=models.UserRole.admin,
            is_active=True,
            password=raw_password,
        ))
        action = "updated"
    else:
        crud.create_user(db, schemas.UserCreate(
            username=username,
            name=name,
            password=raw_password,
            role=models.UserRole.admin,
        ))
        action = "created"

    logger.info(f"Admin user {action}: username='{username}'")
    return action

def main():
    setup_logging(json_output=False)
    create_tables()
    db = SessionLocal()
    try:
        upsert_admin(db)
    finally:
        db.close()

if __name__ == "__main__":
    main()
