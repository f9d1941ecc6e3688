# tests/test_config.py
import pytest
from pydantic import ValidationError

from rural_health.config import Settings

SECRET = "x" * 32


def test_cors_origins_split_from_env_string():
    settings = Settings(DATABASE_URL="sqlite://", SECRET_KEY=SECRET, CORS_ORIGINS="https://a.org, https://b.org,")

    assert settings.cors_origins == ["https://a.org", "https://b.org"]


def test_defaults():
    settings = Settings(DATABASE_URL="postgresql://clinic@localhost/rh", SECRET_KEY=SECRET)

    assert settings.access_token_expire_minutes == 1440
    assert settings.algorithm == "HS256"
    assert not settings.is_sqlite


@pytest.mark.parametrize("overrides", [
    {"DATABASE_URL": "mysql://clinic@localhost/rh"},
    {"SECRET_KEY": "too-short"},
])
def test_invalid_settings_rejected(overrides):
    values = {"DATABASE_URL": "sqlite://", "SECRET_KEY": SECRET, **overrides}

    with pytest.raises(ValidationError):
        Settings(**values)
