# tests/test_initial_data.py
import pytest

from rural_health import crud, models, schemas, security
from rural_health.initial_data import DEFAULT_VACCINES, seed_vaccines
import seed_admin


def test_seed_vaccines_is_idempotent(db):
    assert seed_vaccines(db) == len(DEFAULT_VACCINES)
    assert seed_vaccines(db) == 0
    assert len(crud.get_vaccines(db)) == len(DEFAULT_VACCINES)


def test_upsert_admin_creates_then_restores(db, monkeypatch):
    monkeypatch.setenv("ADMIN_DEFAULT_USERNAME", "boss")
    monkeypatch.setenv("ADMIN_DEFAULT_PASSWORD", "first-password")

    assert seed_admin.upsert_admin(db) == "created"
    admin = crud.get_user_by_username(db, "boss")
    assert admin.role == models.UserRole.admin

    crud.update_user(db, admin.id, schemas.UserUpdate(role=models.UserRole.health_worker, is_active=False))
    monkeypatch.setenv("ADMIN_DEFAULT_PASSWORD", "second-password")

    assert seed_admin.upsert_admin(db) == "updated"
    db.refresh(admin)
    assert admin.role == models.UserRole.admin
    assert admin.is_active is True
    assert security.verify_password("second-password", admin.password_hash)


def test_upsert_admin_requires_password(db, monkeypatch):
    monkeypatch.delenv("ADMIN_DEFAULT_PASSWORD", raising=False)

    with pytest.raises(RuntimeError):
        seed_admin.upsert_admin(db)
