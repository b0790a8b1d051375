# care_core/diagnoses/apps.py
from django.apps import AppConfig


class DiagnosesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "care_core.diagnoses"
