# This project was developed with assistance from AI tools.
"""Grievance ticket schemas."""

from datetime import datetime

from homestay_db.enums import (
    GrievanceCategory,
    GrievancePriority,
    GrievanceStatus,
    GrievanceType,
)
from pydantic import BaseModel, ConfigDict, Field

from . import Pagination


class GrievanceCreate(BaseModel):
    ticket_type: GrievanceType | None = None
    application_id: int | None = None
    category: GrievanceCategory = GrievanceCategory.OTHER
    priority: GrievancePriority = GrievancePriority.MEDIUM
    subject: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=8000)


class GrievanceUpdate(BaseModel):
    """Officer-only changes."""

    status: GrievanceStatus | None = None
    priority: GrievancePriority | None = None
    assigned_to: str | None = None
    resolution_notes: str | None = Field(default=None, max_length=8000)


class GrievanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_number: str
    ticket_type: GrievanceType
    user_id: int
    application_id: int | None = None
    category: GrievanceCategory
    priority: GrievancePriority
    status: GrievanceStatus
    subject: str
    description: str
    assigned_to: str | None = None
    resolution_notes: str | None = None
    last_comment_at: datetime | None = None
    last_read_by_owner: datetime | None = None
    last_read_by_officer: datetime | None = None
    resolved_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class GrievanceListResponse(BaseModel):
    data: list[GrievanceResponse]
    pagination: Pagination


class CommentCreate(BaseModel):
    comment: str = Field(min_length=1, max_length=8000)
    is_internal: bool = False


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    grievance_id: int
    user_id: int
    author_role: str | None = None
    comment: str
    is_internal: bool
    created_at: datetime | None = None


class CommentListResponse(BaseModel):
    data: list[CommentResponse]
    count: int


class UnreadCountResponse(BaseModel):
    unread: int


class CountItem(BaseModel):
    key: str | None
    count: int


class GrievanceSummaryResponse(BaseModel):
    total: int
    by_status: dict[str, int]
    average_resolution_days: float | None = None
    created_last_30_days: int
    resolved_last_30_days: int


class MonthlyTrendItem(BaseModel):
    month: str
    created: int
    resolved: int
