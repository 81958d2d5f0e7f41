# This project was developed with assistance from AI tools.
"""Document request/response schemas."""

from datetime import datetime

from homestay_db.enums import DocumentStatus, DocumentType
from pydantic import BaseModel, ConfigDict, Field


class DocumentResponse(BaseModel):
    """Document metadata with its scrutiny verdict."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    doc_type: DocumentType
    file_name: str | None = None
    file_path: str | None = None
    content_type: str | None = None
    file_size: int | None = None
    verification_status: DocumentStatus
    verification_notes: str | None = None
    verified_by: str | None = None
    verified_at: datetime | None = None
    uploaded_by: str | None = None
    created_at: datetime | None = None


class DocumentListResponse(BaseModel):
    data: list[DocumentResponse]
    count: int


class DocumentVerifyRequest(BaseModel):
    """DA verdict on one document."""

    status: DocumentStatus
    notes: str | None = Field(default=None, max_length=2000)
