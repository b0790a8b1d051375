# config/settings/local.py
from .base import *  # noqa

DEBUG = True

LOGGING["loggers"]["care_core"]["level"] = "DEBUG"  # noqa: F405
