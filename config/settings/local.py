# config/settings/local.py
import os

from .base import *  # noqa

DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"

# SQLite keeps local runs and the test suite self-contained.
# Set DB_ENGINE=postgres to use the Postgres block from base.py.
if os.getenv("DB_ENGINE", "sqlite").lower() != "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",  # noqa: F405
        }
    }
