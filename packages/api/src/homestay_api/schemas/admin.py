# This project was developed with assistance from AI tools.
"""Pydantic response models for admin and audit endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AuditEventItem(BaseModel):
    """Single audit event in a query response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    timestamp: datetime | None = None
    event_type: str
    user_id: str | None = None
    user_role: str | None = None
    application_id: int | None = None
    grievance_id: int | None = None
    event_data: dict | str | None = None


class AuditByApplicationResponse(BaseModel):
    """Audit trail of a single application."""

    application_id: int
    count: int
    events: list[AuditEventItem]


class AuditLogResponse(BaseModel):
    count: int
    events: list[AuditEventItem]


class AuditChainVerifyResponse(BaseModel):
    """Response for GET /api/admin/audit/verify."""

    status: str
    events_checked: int
    first_break_id: int | None = None


class SeedResponse(BaseModel):
    """Response for POST /api/admin/seed."""

    status: str
    seeded_at: str | None = None
    config_hash: str | None = None
    users: int | None = None
    applications: int | None = None
    grievances: int | None = None


class SeedStatusResponse(BaseModel):
    """Response for GET /api/admin/seed/status."""

    seeded: bool
    seeded_at: str | None = None
    config_hash: str | None = None
    summary: dict | None = None
