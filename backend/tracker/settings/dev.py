# flake8: noqa
"""
Development environment settings for the finance tracker.

Extends base settings with a local PostgreSQL database, relaxed security
and DEBUG logging for the ledger services.
"""

import logging

from decouple import Csv

from .base import *
from .utils import load_environment_config

config = load_environment_config("development")

ENVIRONMENT = "development"

DEBUG = True
SECRET_KEY = config("SECRET_KEY", default="django-insecure-dev-key")
ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

# Frontend dev server
CORS_ALLOWED_ORIGINS = config(
    "CORS_ALLOWED_ORIGINS", default="http://localhost:5173", cast=Csv()
)

# Longer tokens while clicking through the API by hand
SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"] = timedelta(hours=8)

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": config("POSTGRES_DB", default="finance_tracker"),
        "USER": config("POSTGRES_USER", default="postgres"),
        "PASSWORD": config("POSTGRES_PASSWORD", default="postgres"),
        "HOST": config("DB_HOST", default="localhost"),
        "PORT": config("DB_PORT", default="5432"),
    }
}

# =============================================================================
# LOGGING
# =============================================================================

os.makedirs(LOGS_DIR, exist_ok=True)

LOGGING["handlers"]["dev_file"] = {
    "level": "DEBUG",
    "class": "logging.handlers.RotatingFileHandler",
    "filename": LOGS_DIR / "tracker_dev.log",
    "maxBytes": 1024 * 1024 * 10,
    "backupCount": 3,
    "formatter": "structured",
    "encoding": "utf-8",
}

for logger_name in ["users", "ledger", "tracker"]:
    LOGGING["loggers"][logger_name]["handlers"] = ["console", "dev_file"]
    LOGGING["loggers"][logger_name]["level"] = "DEBUG"

logger = logging.getLogger(__name__)
logger.info(
    "Development environment initialized",
    extra={
        "environment": ENVIRONMENT,
        "database_host": DATABASES["default"]["HOST"],
        "action": "environment_startup",
        "component": "settings",
    },
)
