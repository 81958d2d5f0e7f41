# This project was developed with assistance from AI tools.
"""In-app notification schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from . import Pagination


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int | None = None
    grievance_id: int | None = None
    type: str
    title: str
    message: str
    is_read: bool
    created_at: datetime | None = None


class NotificationListResponse(BaseModel):
    data: list[NotificationResponse]
    pagination: Pagination
    unread: int


class MarkAllReadResponse(BaseModel):
    updated: int
