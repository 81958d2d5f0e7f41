# This project was developed with assistance from AI tools.
"""Inspection order and field report schemas."""

from datetime import date, datetime

from homestay_db.enums import InspectionRecommendation, InspectionStatus, PropertyCategory
from pydantic import BaseModel, ConfigDict, Field


class ScheduleInspectionRequest(BaseModel):
    """DTDO order for a site inspection."""

    inspection_date: datetime
    assigned_to: str = Field(description="Keycloak user id of the Dealing Assistant.")
    inspection_address: str | None = None
    special_instructions: str | None = Field(default=None, max_length=2000)
    expected_version: int | None = None


class InspectionOrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    scheduled_by: str
    assigned_to: str
    district: str
    inspection_date: datetime
    inspection_address: str | None = None
    special_instructions: str | None = None
    status: InspectionStatus
    owner_acknowledged_at: datetime | None = None
    created_at: datetime | None = None


class InspectionOrderListResponse(BaseModel):
    data: list[InspectionOrderResponse]
    count: int


class InspectionReportCreate(BaseModel):
    """DA field report. Early inspections need an override and a justification."""

    actual_inspection_date: date
    room_count_verified: bool = False
    actual_room_count: int | None = Field(default=None, ge=0)
    category_meets_standards: bool = False
    recommended_category: PropertyCategory | None = None
    checklist: dict | None = None
    observations: str | None = Field(default=None, max_length=8000)
    recommendation: InspectionRecommendation
    early_inspection_override: bool = False
    early_inspection_reason: str | None = Field(default=None, max_length=2000)


class InspectionReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    inspection_order_id: int
    application_id: int
    submitted_by: str
    actual_inspection_date: date
    room_count_verified: bool
    actual_room_count: int | None = None
    category_meets_standards: bool
    recommended_category: PropertyCategory | None = None
    checklist: dict | None = None
    observations: str | None = None
    recommendation: InspectionRecommendation
    early_inspection_override: bool
    early_inspection_reason: str | None = None
    created_at: datetime | None = None


class DealingAssistantItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    keycloak_user_id: str
    full_name: str
    email: str | None = None
    district: str | None = None
