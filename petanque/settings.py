"""
Django settings for the petanque project.

Values come from the environment; a .env file at the project root is loaded
first if present.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env", override=False)


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.environ.get("PETANQUE_SECRET_KEY", "dev-only-secret-key")

DEBUG = env_bool("PETANQUE_DEBUG", True)

ALLOWED_HOSTS = [
    h for h in os.environ.get("PETANQUE_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h
]

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "reversion",
    "petanque.tournament_core",
    "petanque.tournament",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

DATABASES = {
    "default": {
        "ENGINE": os.environ.get("PETANQUE_DB_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.environ.get("PETANQUE_DB_NAME", str(BASE_DIR / "petanque.sqlite3")),
        "USER": os.environ.get("PETANQUE_DB_USER", ""),
        "PASSWORD": os.environ.get("PETANQUE_DB_PASSWORD", ""),
        "HOST": os.environ.get("PETANQUE_DB_HOST", ""),
        "PORT": os.environ.get("PETANQUE_DB_PORT", ""),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

LOG_LEVEL = os.environ.get("PETANQUE_LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "petanque": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "django": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    },
}
