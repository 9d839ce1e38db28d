"""Tests for ``backend.config.DeploymentSettings``."""

from __future__ import annotations

import pytest
from django.conf import settings
from pydantic import ValidationError

from backend.config import DeploymentSettings

_VARIABLES = (
    "DJANGO_DEBUG",
    "DJANGO_ALLOWED_HOSTS",
    "EMAIL_PORT",
    "EMAIL_USE_TLS",
    "FRAUDLENS_LOG_LEVEL",
    "NODAL_EMAIL",
    "CRPC_COMPLIANCE_HOURS",
    "DATABASE_ENGINE",
)


@pytest.fixture()
def clean_env(monkeypatch):
    for name in _VARIABLES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults_give_a_local_setup(clean_env):
    config = DeploymentSettings(_env_file=None)

    assert config.debug is True
    assert config.allowed_hosts == ["localhost", "127.0.0.1"]
    assert config.uses_sqlite
    assert config.crpc_compliance_hours == 48
    assert config.authority_recipients["nodal"] == "nodal@fraud.gov.in"


def test_environment_values_are_typed(clean_env):
    clean_env.setenv("DJANGO_DEBUG", "false")
    clean_env.setenv("DJANGO_ALLOWED_HOSTS", "api.fraudlens.in, localhost")
    clean_env.setenv("EMAIL_PORT", "2525")
    clean_env.setenv("EMAIL_USE_TLS", "0")
    clean_env.setenv("FRAUDLENS_LOG_LEVEL", "debug")
    clean_env.setenv("NODAL_EMAIL", "nodal@cybercrime.example")
    clean_env.setenv("CRPC_COMPLIANCE_HOURS", "72")
    clean_env.setenv("DATABASE_ENGINE", "django.db.backends.postgresql")

    config = DeploymentSettings(_env_file=None)

    assert config.debug is False
    assert config.allowed_hosts == ["api.fraudlens.in", "localhost"]
    assert config.email_port == 2525
    assert config.email_use_tls is False
    assert config.log_level == "DEBUG"
    assert config.authority_recipients["nodal"] == "nodal@cybercrime.example"
    assert config.crpc_compliance_hours == 72
    assert not config.uses_sqlite


@pytest.mark.parametrize("value", ["0", "soon"])
def test_bad_compliance_window_is_rejected(clean_env, value):
    clean_env.setenv("CRPC_COMPLIANCE_HOURS", value)

    with pytest.raises(ValidationError):
        DeploymentSettings(_env_file=None)


@pytest.mark.skipif(
    not settings.DATABASES["default"]["ENGINE"].endswith("sqlite3"),
    reason="SQLite-only transaction mode",
)
def test_sqlite_writers_take_the_lock_up_front():
    assert settings.DATABASES["default"]["OPTIONS"]["transaction_mode"] == "IMMEDIATE"
