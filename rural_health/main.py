import logging

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rural_health import crud
from rural_health.config import get_settings
from rural_health.core.logging import setup_logging
from rural_health.database import create_tables
from rural_health.initial_data import create_initial_data
from rural_health.routers import auth, users, patients, vaccines, vaccinations, appointments, reports, health

settings = get_settings()
log = setup_logging(level=settings.log_level, json_output=settings.is_production)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version=settings.app_version)

@app.on_event("startup")
def on_startup():
    create_tables()
    if settings.seed_vaccines:
        create_initial_data()
    log.info("startup_complete", app=settings.app_name, environment=settings.environment)

@app.exception_handler(crud.CRUDError)
async def crud_error_handler(request: Request, exc: crud.CRUDError):
    # Details stay in the server log; clients get a generic failure
    logger.error(f"Store failure on {request.method} {request.url.path}: {exc}", exc_info=exc.__cause__)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "OPTIONS", "HEAD"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(patients.router, prefix="/api")
app.include_router(vaccines.router, prefix="/api")
app.include_router(vaccinations.router, prefix="/api")
app.include_router(appointments.router, prefix="/api")
app.include_router(reports.router, prefix="/api")
app.include_router(health.router, prefix="/api")


if __name__ == "__main__":
    uvicorn.run("rural_health.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
