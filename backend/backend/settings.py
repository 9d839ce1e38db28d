"""
Django settings for the FraudLens backend.

Deployment-specific values come from ``backend.config.DeploymentSettings``
(environment variables or ``backend/.env``); the defaults give a working
local setup (SQLite, console e-mail).
"""

from datetime import timedelta
from pathlib import Path

from backend.config import get_deployment_settings

env = get_deployment_settings()

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = env.secret_key

DEBUG = env.debug

ALLOWED_HOSTS = env.allowed_hosts


# ── Applications ─────────────────────────────────────────────────────

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Third-party
    "rest_framework",
    "rest_framework_simplejwt",
    "drf_spectacular",

    # Local
    "core",
    "accounts",
    "cases",
    "crpc",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "backend.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "backend.wsgi.application"


# ── Database ─────────────────────────────────────────────────────────

DATABASES = {
    "default": {
        "ENGINE": env.database_engine,
        "NAME": env.database_name,
        "USER": env.database_user,
        "PASSWORD": env.database_password,
        "HOST": env.database_host,
        "PORT": env.database_port,
        "ATOMIC_REQUESTS": False,
    }
}

if env.uses_sqlite:
    # SQLite has no row locks: IMMEDIATE transactions take the write lock
    # up front so competing lifecycle writes queue instead of deadlocking.
    # The test database is a file so threads share it with real locking.
    DATABASES["default"]["OPTIONS"] = {
        "transaction_mode": "IMMEDIATE",
        "timeout": env.sqlite_timeout,
    }
    DATABASES["default"]["TEST"] = {"NAME": str(BASE_DIR / "test_db.sqlite3")}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# ── Authentication ───────────────────────────────────────────────────

AUTH_USER_MODEL = "accounts.User"

AUTHENTICATION_BACKENDS = [
    "accounts.backends.MultiFieldAuthBackend",
    "django.contrib.auth.backends.ModelBackend",
]

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]


# ── Internationalization ─────────────────────────────────────────────

LANGUAGE_CODE = "en-us"
TIME_ZONE = "Asia/Kolkata"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"


# ── Django REST Framework ────────────────────────────────────────────

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "EXCEPTION_HANDLER": "core.domain.exception_handler.domain_exception_handler",
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=env.jwt_access_minutes),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=env.jwt_refresh_days),
    "AUTH_HEADER_TYPES": ("Bearer",),
}

SPECTACULAR_SETTINGS = {
    "TITLE": "FraudLens API",
    "DESCRIPTION": "Fraud case reporting, 91CRPC notices and investigation workflow.",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}


# ── E-mail ───────────────────────────────────────────────────────────

EMAIL_BACKEND = env.email_backend
EMAIL_HOST = env.email_host
EMAIL_PORT = env.email_port
EMAIL_HOST_USER = env.email_host_user
EMAIL_HOST_PASSWORD = env.email_host_password
EMAIL_USE_TLS = env.email_use_tls
EMAIL_TIMEOUT = env.email_timeout
DEFAULT_FROM_EMAIL = env.default_from_email


# ── FraudLens ────────────────────────────────────────────────────────

FRAUDLENS = {
    "AUTHORITY_RECIPIENTS": env.authority_recipients,
    "CRPC_COMPLIANCE_HOURS": env.crpc_compliance_hours,
}


# ── Logging ──────────────────────────────────────────────────────────

FRAUDLENS_LOG_LEVEL = env.log_level

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        app: {
            "handlers": ["console"],
            "level": FRAUDLENS_LOG_LEVEL,
            "propagate": False,
        }
        for app in ("core", "accounts", "cases", "crpc")
    },
}
