# config/settings/base.py
from pathlib import Path
import os
from dotenv import load_dotenv


BASE_DIR = Path(__file__).resolve().parent.parent.parent  # repo root
load_dotenv(BASE_DIR / ".env")

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "unsafe-dev-key")
DEBUG = os.getenv("DJANGO_DEBUG", "0") == "1"
ALLOWED_HOSTS = ["*"]

INSTALLED_APPS = [
    # Django
    "django.contrib.contenttypes",
    "django.contrib.auth",

    # Third-party
    "rest_framework",

    # Domain apps (modular monolith)
    "care_core.common.apps.CommonConfig",
    "care_core.audit.apps.AuditConfig",
    "care_core.facilities.apps.FacilitiesConfig",
    "care_core.patients.apps.PatientsConfig",
    "care_core.diagnoses.apps.DiagnosesConfig",
    "care_core.events.apps.EventsConfig",
]

MIDDLEWARE = []

ROOT_URLCONF = None

_DB_ENGINE = os.getenv("DB_ENGINE", "django.db.backends.sqlite3")

if _DB_ENGINE == "django.db.backends.sqlite3":
    DATABASES = {
        "default": {
            "ENGINE": _DB_ENGINE,
            "NAME": os.getenv("DB_NAME", str(BASE_DIR / "care.sqlite3")),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": _DB_ENGINE,
            "NAME": os.getenv("DB_NAME", "care"),
            "USER": os.getenv("DB_USER", "care"),
            "PASSWORD": os.getenv("DB_PASSWORD", "care"),
            "HOST": os.getenv("DB_HOST", "127.0.0.1"),
            "PORT": os.getenv("DB_PORT", "5432"),
        }
    }

LANGUAGE_CODE = "en-us"
# Date-only fields are interpreted as local start-of-day in this zone.
TIME_ZONE = os.getenv("CARE_TIME_ZONE", "America/Chicago")
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# App-level knobs for care_core.
CARE_CORE = {
    # None or "any": any status may be set. "lifecycle": the built-in
    # PENDING -> COMPLETED -> BILLED -> PAID table. Or an explicit mapping
    # {from_status: [to_status, ...]}.
    "EVENT_STATUS_TRANSITIONS": None,

    # How far back a TCM discharge date is considered "recent".
    "TCM_DISCHARGE_LOOKBACK_DAYS": 30,
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "care_core": {
            "handlers": ["console"],
            "level": os.getenv("CARE_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
