"""Audit trail schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuditLogResponse(BaseModel):
    """Schema for an audit trail entry."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    actor_id: UUID
    action: str
    resource_type: str
    resource_id: UUID | None
    old_values: dict | None
    new_values: dict | None
    created_at: datetime
