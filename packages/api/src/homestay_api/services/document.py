# This project was developed with assistance from AI tools.
"""Supporting documents attached to an application.

Owners upload while the application is a draft or awaiting corrections.
Re-uploading a document type that the DA flagged for correction replaces
the flagged file and returns it to pending verification.
"""

import logging

from homestay_db import Application, Document
from homestay_db.enums import DocumentStatus, DocumentType
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.auth import UserContext
from .application import EDITABLE_STATUSES
from .audit import write_audit_event
from .scope import apply_data_scope
from .storage import get_storage_service

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "application/pdf",
    "image/jpeg",
    "image/png",
}


class DocumentUploadError(Exception):
    """Raised when a document upload fails validation."""

    def __init__(self, message: str, status_code: int = 422):
        super().__init__(message)
        self.status_code = status_code


async def list_documents(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> list[Document] | None:
    """Documents for an application, or None if the application is not visible."""
    app_stmt = apply_data_scope(
        select(Application.id).where(Application.id == application_id), user.data_scope, user
    )
    if (await session.execute(app_stmt)).scalar_one_or_none() is None:
        return None

    stmt = (
        select(Document)
        .where(Document.application_id == application_id)
        .order_by(Document.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_document(
    session: AsyncSession,
    user: UserContext,
    document_id: int,
) -> Document | None:
    stmt = select(Document).where(Document.id == document_id)
    stmt = apply_data_scope(stmt, user.data_scope, user, join_to_application=Document.application)
    result = await session.execute(stmt)
    return result.unique().scalar_one_or_none()


async def count_documents(session: AsyncSession, application_id: int) -> dict[DocumentStatus, int]:
    """Document counts per verification status."""
    stmt = (
        select(Document.verification_status, func.count(Document.id))
        .where(Document.application_id == application_id)
        .group_by(Document.verification_status)
    )
    rows = (await session.execute(stmt)).all()
    return {DocumentStatus(status): count for status, count in rows}


def validate_upload(content_type: str, size: int) -> None:
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise DocumentUploadError(
            f"Unsupported content type: {content_type}. "
            f"Allowed: {', '.join(sorted(ALLOWED_CONTENT_TYPES))}"
        )
    max_bytes = settings.UPLOAD_MAX_SIZE_MB * 1024 * 1024
    if size > max_bytes:
        raise DocumentUploadError(
            f"File size {size} exceeds maximum of {settings.UPLOAD_MAX_SIZE_MB}MB",
            status_code=413,
        )
    if size == 0:
        raise DocumentUploadError("Uploaded file is empty")


async def upload_document(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    doc_type: DocumentType,
    filename: str,
    content_type: str,
    file_data: bytes,
) -> Document | None:
    """Store a file in S3 and record it against the application.

    Returns None if the application is not visible to the caller.

    Raises:
        DocumentUploadError: bad content type, size, or the application is
            no longer accepting documents.
    """
    validate_upload(content_type, len(file_data))

    app_stmt = apply_data_scope(
        select(Application).where(Application.id == application_id), user.data_scope, user
    )
    app = (await session.execute(app_stmt)).unique().scalar_one_or_none()
    if app is None:
        return None
    if app.status not in EDITABLE_STATUSES:
        raise DocumentUploadError(
            f"Documents cannot be uploaded while the application is '{app.status.value}'.",
            status_code=422,
        )

    existing = await session.execute(
        select(Document).where(
            Document.application_id == application_id,
            Document.doc_type == doc_type,
            Document.verification_status == DocumentStatus.NEEDS_CORRECTION,
        )
    )
    doc = existing.scalars().first()
    replaced = doc is not None
    if doc is None:
        doc = Document(application_id=application_id, doc_type=doc_type)
        session.add(doc)
        await session.flush()

    storage = get_storage_service()
    object_key = storage.build_object_key(app.application_number, doc_type.value, doc.id, filename)
    await storage.upload_file(file_data, object_key, content_type)

    doc.file_name = filename
    doc.file_path = object_key
    doc.content_type = content_type
    doc.file_size = len(file_data)
    doc.uploaded_by = user.user_id
    doc.verification_status = DocumentStatus.PENDING
    doc.verification_notes = None
    doc.verified_by = None
    doc.verified_at = None

    await write_audit_event(
        session,
        event_type="document_replaced" if replaced else "document_uploaded",
        user=user,
        application_id=application_id,
        event_data={"document_id": doc.id, "doc_type": doc_type.value, "size": len(file_data)},
    )
    await session.commit()
    await session.refresh(doc)
    logger.info("Document %s (%s) stored for application %s", doc.id, doc_type.value, application_id)
    return doc
