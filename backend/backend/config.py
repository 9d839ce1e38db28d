"""
Deployment configuration read from the environment (and an optional
``.env`` file next to ``manage.py``).

``backend.settings`` loads this once through ``get_deployment_settings``
and copies the values into Django's settings names.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from core.constants import DEFAULT_AUTHORITY_RECIPIENTS, DEFAULT_CRPC_COMPLIANCE_HOURS

BACKEND_DIR = Path(__file__).resolve().parent.parent


class DeploymentSettings(BaseSettings):
    """Every environment variable the backend understands."""

    model_config = SettingsConfigDict(
        env_file=BACKEND_DIR / ".env",
        extra="ignore",
        populate_by_name=True,
    )

    # ── Django core ─────────────────────────────────────────────────
    secret_key: str = Field(
        default="django-insecure-fraudlens-local-development-key-change-me",
        validation_alias=AliasChoices("DJANGO_SECRET_KEY", "SECRET_KEY"),
    )
    debug: bool = Field(default=True, validation_alias="DJANGO_DEBUG")
    allowed_hosts: Annotated[list[str], NoDecode] = Field(
        default=["localhost", "127.0.0.1"],
        validation_alias="DJANGO_ALLOWED_HOSTS",
    )

    # ── Database ────────────────────────────────────────────────────
    database_engine: str = Field(
        default="django.db.backends.sqlite3",
        validation_alias="DATABASE_ENGINE",
    )
    database_name: str = Field(
        default=str(BACKEND_DIR / "db.sqlite3"),
        validation_alias="DATABASE_NAME",
    )
    database_user: str = Field(default="", validation_alias="DATABASE_USER")
    database_password: str = Field(default="", validation_alias="DATABASE_PASSWORD")
    database_host: str = Field(default="", validation_alias="DATABASE_HOST")
    database_port: str = Field(default="", validation_alias="DATABASE_PORT")
    sqlite_timeout: int = Field(default=20, validation_alias="SQLITE_TIMEOUT")

    # ── JWT ─────────────────────────────────────────────────────────
    jwt_access_minutes: int = Field(default=60, validation_alias="JWT_ACCESS_MINUTES")
    jwt_refresh_days: int = Field(default=7, validation_alias="JWT_REFRESH_DAYS")

    # ── E-mail ──────────────────────────────────────────────────────
    email_backend: str = Field(
        default="django.core.mail.backends.console.EmailBackend",
        validation_alias="EMAIL_BACKEND",
    )
    email_host: str = Field(default="localhost", validation_alias="EMAIL_HOST")
    email_port: int = Field(default=587, validation_alias="EMAIL_PORT")
    email_host_user: str = Field(default="", validation_alias="EMAIL_HOST_USER")
    email_host_password: str = Field(default="", validation_alias="EMAIL_HOST_PASSWORD")
    email_use_tls: bool = Field(default=True, validation_alias="EMAIL_USE_TLS")
    email_timeout: int = Field(default=30, validation_alias="EMAIL_TIMEOUT")
    default_from_email: str = Field(
        default="FraudLens <noreply@fraudlens.local>",
        validation_alias="DEFAULT_FROM_EMAIL",
    )

    # ── FraudLens ───────────────────────────────────────────────────
    telecom_email: str = Field(
        default=DEFAULT_AUTHORITY_RECIPIENTS["telecom"],
        validation_alias="TELECOM_EMAIL",
    )
    banking_email: str = Field(
        default=DEFAULT_AUTHORITY_RECIPIENTS["banking"],
        validation_alias="BANKING_EMAIL",
    )
    nodal_email: str = Field(
        default=DEFAULT_AUTHORITY_RECIPIENTS["nodal"],
        validation_alias="NODAL_EMAIL",
    )
    crpc_compliance_hours: int = Field(
        default=DEFAULT_CRPC_COMPLIANCE_HOURS,
        gt=0,
        validation_alias="CRPC_COMPLIANCE_HOURS",
    )
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("FRAUDLENS_LOG_LEVEL", "LOG_LEVEL"),
    )

    @field_validator("allowed_hosts", mode="before")
    @classmethod
    def _split_hosts(cls, value):
        if isinstance(value, str):
            return [host.strip() for host in value.split(",") if host.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @property
    def uses_sqlite(self) -> bool:
        return self.database_engine.endswith("sqlite3")

    @property
    def authority_recipients(self) -> dict[str, str]:
        return {
            "telecom": self.telecom_email,
            "banking": self.banking_email,
            "nodal": self.nodal_email,
        }


@lru_cache(maxsize=1)
def get_deployment_settings() -> DeploymentSettings:
    """Return the cached deployment settings."""
    return DeploymentSettings()
