# This project was developed with assistance from AI tools.
"""Application status response schemas."""

from datetime import datetime

from pydantic import BaseModel


class PendingAction(BaseModel):
    """A single action the owner or an officer needs to take."""

    action_type: str
    description: str


class StatusInfo(BaseModel):
    """Human-readable info about the current application status."""

    label: str
    description: str
    next_step: str
    typical_timeline: str


class Milestone(BaseModel):
    id: str
    label: str
    short: str


class ProgressInfo(BaseModel):
    """Owner-facing progress bar state."""

    milestones: list[Milestone]
    current_index: int
    current_milestone: Milestone
    summary: str


class ApplicationStatusResponse(BaseModel):
    """Aggregated status summary for an application."""

    application_id: int
    application_number: str
    status: str
    display_status: str
    display_label: str
    status_info: StatusInfo
    progress: ProgressInfo
    version: int
    allowed_actions: list[str]
    pending_actions: list[PendingAction]


class TimelineEntry(BaseModel):
    id: int
    timestamp: datetime | None = None
    event_type: str
    user_id: str | None = None
    user_role: str | None = None
    action: str | None = None
    from_status: str | None = None
    to_status: str | None = None
    details: dict | None = None


class TimelineResponse(BaseModel):
    application_id: int
    events: list[TimelineEntry]
