# care_core/audit/services.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from django.db import transaction

from care_core.audit.models import AuditEvent
from care_core.common.clock import resolve_clock


@dataclass(frozen=True)
class AuditRecord:
    event_code: str
    entity_type: str
    entity_id: UUID
    actor: str
    occurred_at: datetime
    metadata: Dict[str, Any]


class AuditService:
    """
    Central audit writer.
    Persists into AuditEvent (immutable).
    """

    @staticmethod
    @transaction.atomic
    def log(
        *,
        event_code: str,
        entity_type: str,
        entity_id: UUID,
        metadata: Optional[Dict[str, Any]] = None,
        actor: str = "",
        clock=None,
    ) -> AuditRecord:
        metadata = metadata or {}
        occurred_at = resolve_clock(clock).now()

        AuditEvent.objects.create(
            event_code=event_code,
            entity_type=entity_type,
            entity_id=entity_id,
            actor=actor or "",
            occurred_at=occurred_at,
            created_at=occurred_at,
            updated_at=occurred_at,
            metadata=metadata,
        )

        return AuditRecord(
            event_code=event_code,
            entity_type=entity_type,
            entity_id=entity_id,
            actor=actor or "",
            occurred_at=occurred_at,
            metadata=metadata,
        )
