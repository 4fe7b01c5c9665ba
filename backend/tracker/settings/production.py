# flake8: noqa
"""
Production environment settings for the finance tracker.

Extends base settings with strict security, pooled PostgreSQL connections,
static files through WhiteNoise and rotating log files.
"""

import logging

from decouple import Csv

from .base import *
from .utils import load_environment_config

config = load_environment_config("production")

ENVIRONMENT = "production"

# =============================================================================
# SECURITY
# =============================================================================

DEBUG = False
SECRET_KEY = config("SECRET_KEY")
ALLOWED_HOSTS = config("ALLOWED_HOSTS", default="", cast=Csv())

CORS_ALLOWED_ORIGINS = config("CORS_ALLOWED_ORIGINS", default="", cast=Csv())

SECURE_SSL_REDIRECT = config("SECURE_SSL_REDIRECT", default=True, cast=bool)
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True

SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"] = timedelta(
    minutes=config("JWT_ACCESS_MINUTES", default=15, cast=int)
)

# =============================================================================
# DATABASE
# =============================================================================

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": config("POSTGRES_DB"),
        "USER": config("POSTGRES_USER"),
        "PASSWORD": config("POSTGRES_PASSWORD"),
        "HOST": config("DB_HOST"),
        "PORT": config("DB_PORT", default="5432"),
        "CONN_MAX_AGE": config("DB_CONN_MAX_AGE", default=60, cast=int),
        "OPTIONS": {"connect_timeout": 5},
    }
}

# =============================================================================
# LEDGER
# =============================================================================

LEDGER["BUDGET_WARNING_PERCENTAGE"] = config(
    "LEDGER_BUDGET_WARNING_PERCENTAGE", default=80, cast=int
)

# =============================================================================
# STATIC FILES
# =============================================================================

MIDDLEWARE.insert(1, "whitenoise.middleware.WhiteNoiseMiddleware")
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {
        "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"
    },
}

# =============================================================================
# LOGGING
# =============================================================================

os.makedirs(LOGS_DIR, exist_ok=True)

LOGGING["handlers"]["ledger_file"] = {
    "level": "INFO",
    "class": "logging.handlers.RotatingFileHandler",
    "filename": LOGS_DIR / "tracker.log",
    "maxBytes": 1024 * 1024 * 50,
    "backupCount": 10,
    "formatter": "structured",
    "encoding": "utf-8",
}
LOGGING["handlers"]["error_file"] = {
    "level": "ERROR",
    "class": "logging.handlers.RotatingFileHandler",
    "filename": LOGS_DIR / "tracker_errors.log",
    "maxBytes": 1024 * 1024 * 20,
    "backupCount": 10,
    "formatter": "structured",
    "encoding": "utf-8",
}

for logger_name in ["django", "users", "ledger", "tracker"]:
    LOGGING["loggers"][logger_name]["handlers"] = ["console", "ledger_file", "error_file"]
    LOGGING["loggers"][logger_name]["level"] = "INFO"

LOGGING["loggers"]["django.db.backends"]["level"] = "ERROR"

logger = logging.getLogger(__name__)
logger.info(
    "Production environment initialized",
    extra={
        "environment": ENVIRONMENT,
        "allowed_hosts": ALLOWED_HOSTS,
        "budget_warning_percentage": LEDGER["BUDGET_WARNING_PERCENTAGE"],
        "action": "environment_startup",
        "component": "settings",
    },
)
