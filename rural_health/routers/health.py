# rural_health/routers/health.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import logging

from .. import schemas
from ..database import get_db, ping

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Health Checks"],
)

@router.get("/health", response_model=schemas.HealthResponse)
def health_check(db: Session = Depends(get_db)):
    """Liveness plus a database round trip."""
    try:
        ping(db)
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database unavailable")
    return {"status": "ok", "database": "ok"}
