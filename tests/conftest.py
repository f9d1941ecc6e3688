# tests/conftest.py
import os

# Settings are read at import time; point them at throwaway values first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-at-least-32-chars")
os.environ.setdefault("SEED_VACCINES", "false")
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rural_health import crud, models, schemas, security
from rural_health.database import create_tables, drop_tables, get_db
from rural_health.main import app


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield engine
    drop_tables(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, username, role=models.UserRole.health_worker, password="password1", name=None, is_active=True):
    return crud.create_user(db, schemas.UserCreate(
        username=username,
        name=name or username.title(),
        password=password,
        role=role,
        is_active=is_active,
    ))


def auth_headers(user):
    return {"Authorization": f"Bearer {security.token_for_user(user)}"}


@pytest.fixture
def admin_user(db):
    return make_user(db, "admin", role=models.UserRole.admin, name="Asha Admin")


@pytest.fixture
def worker_user(db):
    return make_user(db, "worker", name="Wanjiru Worker")


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def worker_headers(worker_user):
    return auth_headers(worker_user)


@pytest.fixture
def vaccine(db):
    return crud.create_vaccine(db, schemas.VaccineCreate(
        name="BCG", description="Tuberculosis", age_group="infant", doses_required=1,
    ))


def new_patient(db, name="Amina Otieno", age_group=models.AgeGroup.infant, created_by=None, **fields):
    return crud.create_patient(db, schemas.PatientCreate(name=name, age_group=age_group, **fields), created_by=created_by)
