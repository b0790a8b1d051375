# care_core/audit/models.py
from django.db import models

from care_core.common.models import BaseModel


class AuditEvent(BaseModel):
    """
    Immutable audit record.
    Ground-truth timeline of what was written, by which operation.
    """
    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "event.status_changed"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "Event"
    entity_id = models.UUIDField(db_index=True)

    actor = models.CharField(max_length=128, blank=True, default="")

    occurred_at = models.DateTimeField(db_index=True)
    metadata = models.JSONField(default=dict)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["entity_type", "entity_id"]),
            models.Index(fields=["event_code", "occurred_at"]),
        ]
        ordering = ["occurred_at"]

    def __str__(self) -> str:
        return f"{self.event_code} {self.entity_type}:{self.entity_id}"
