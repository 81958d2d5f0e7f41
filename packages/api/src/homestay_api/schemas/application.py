# This project was developed with assistance from AI tools.
"""Application request/response schemas."""

from datetime import datetime
from decimal import Decimal

from homestay_db.enums import (
    ApplicationKind,
    ApplicationStatus,
    OwnerGender,
    PaymentStatus,
    PropertyCategory,
)
from pydantic import BaseModel, ConfigDict, Field

from . import Pagination


class ApplicationCreate(BaseModel):
    """Start a new homestay registration draft."""

    property_name: str = Field(min_length=1, max_length=255)
    district: str = Field(min_length=1, max_length=100)
    tehsil: str | None = None
    address: str | None = None
    pincode: str | None = Field(default=None, pattern=r"^\d{6}$")
    category: PropertyCategory = PropertyCategory.SILVER
    total_rooms: int = Field(default=1, ge=1, le=12)
    is_pangi_sub_division: bool = False
    certificate_validity_years: int | None = Field(default=None, ge=1, le=3)
    owner_name: str | None = None
    owner_mobile: str | None = Field(default=None, pattern=r"^\d{10}$")
    owner_email: str | None = Field(default=None, max_length=255)
    owner_aadhaar: str | None = Field(default=None, pattern=r"^\d{12}$")
    owner_gender: OwnerGender | None = None


class ApplicationUpdate(BaseModel):
    """Partial update to a draft or an application awaiting corrections."""

    property_name: str | None = Field(default=None, min_length=1, max_length=255)
    district: str | None = Field(default=None, min_length=1, max_length=100)
    tehsil: str | None = None
    address: str | None = None
    pincode: str | None = Field(default=None, pattern=r"^\d{6}$")
    category: PropertyCategory | None = None
    total_rooms: int | None = Field(default=None, ge=1, le=12)
    is_pangi_sub_division: bool | None = None
    certificate_validity_years: int | None = Field(default=None, ge=1, le=3)
    owner_name: str | None = None
    owner_mobile: str | None = Field(default=None, pattern=r"^\d{10}$")
    owner_email: str | None = Field(default=None, max_length=255)
    owner_aadhaar: str | None = Field(default=None, pattern=r"^\d{12}$")
    owner_gender: OwnerGender | None = None


class ApplicationResponse(BaseModel):
    """Single application response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    application_number: str
    application_kind: ApplicationKind
    parent_application_id: int | None = None
    status: ApplicationStatus
    display_status: str | None = None
    property_name: str
    district: str
    tehsil: str | None = None
    address: str | None = None
    pincode: str | None = None
    category: PropertyCategory
    total_rooms: int
    requested_rooms: int | None = None
    requested_category: PropertyCategory | None = None
    is_pangi_sub_division: bool = False
    certificate_validity_years: int
    owner_name: str | None = None
    owner_mobile: str | None = None
    owner_email: str | None = None
    owner_aadhaar: str | None = None
    owner_gender: OwnerGender | None = None
    base_fee: Decimal | None = None
    validity_discount: Decimal | None = None
    female_owner_discount: Decimal | None = None
    pangi_discount: Decimal | None = None
    total_fee: Decimal | None = None
    payment_status: PaymentStatus | None = None
    revert_count: int = 0
    dtdo_revert_count: int = 0
    correction_submission_count: int = 0
    da_id: str | None = None
    da_remarks: str | None = None
    da_forwarded_date: datetime | None = None
    dtdo_id: str | None = None
    dtdo_remarks: str | None = None
    dtdo_review_date: datetime | None = None
    clarification_requested: str | None = None
    rejection_reason: str | None = None
    site_inspection_scheduled_date: datetime | None = None
    site_inspection_completed_date: datetime | None = None
    site_inspection_outcome: str | None = None
    certificate_number: str | None = None
    certificate_issued_date: datetime | None = None
    certificate_expiry_date: datetime | None = None
    submitted_at: datetime | None = None
    approved_at: datetime | None = None
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ApplicationListResponse(BaseModel):
    """Paginated list of applications."""

    data: list[ApplicationResponse]
    pagination: Pagination


class VersionedRequest(BaseModel):
    """Body for actions that carry nothing but the version the caller saw."""

    expected_version: int | None = None


class ResubmitRequest(BaseModel):
    """Owner resubmission after corrections."""

    note: str | None = Field(default=None, max_length=2000)
    expected_version: int | None = None


class ServiceRequestCreate(BaseModel):
    """Amendment or cancellation against an approved certificate."""

    kind: ApplicationKind
    requested_rooms: int | None = Field(default=None, ge=1, le=12)
    requested_category: PropertyCategory | None = None
    reason: str | None = Field(default=None, max_length=2000)


class CertificateResponse(BaseModel):
    """Registration certificate data for an approved application."""

    application_id: int
    application_number: str
    certificate_number: str
    property_name: str
    owner_name: str | None = None
    district: str
    tehsil: str | None = None
    address: str | None = None
    category: PropertyCategory
    total_rooms: int
    issued_date: datetime | None = None
    expiry_date: datetime | None = None
    validity_years: int
