# This project was developed with assistance from AI tools.
"""Document upload and metadata routes."""

from homestay_db import get_db
from homestay_db.enums import DocumentType, UserRole
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.document import DocumentListResponse, DocumentResponse
from ..services import document as doc_service

router = APIRouter()

_ALL_AUTHENTICATED = (
    UserRole.ADMIN,
    UserRole.PROPERTY_OWNER,
    UserRole.DEALING_ASSISTANT,
    UserRole.DISTRICT_TOURISM_OFFICER,
    UserRole.STATE_OFFICER,
)

_UPLOAD_ROLES = (UserRole.PROPERTY_OWNER, UserRole.ADMIN)


@router.post(
    "/applications/{application_id}/documents",
    response_model=DocumentResponse,
    status_code=201,
    dependencies=[Depends(require_roles(*_UPLOAD_ROLES))],
)
async def upload_document(
    application_id: int,
    user: CurrentUser,
    file: UploadFile = File(...),
    doc_type: DocumentType = Form(...),
    session: AsyncSession = Depends(get_db),
) -> DocumentResponse:
    """Upload a document. Replaces a copy flagged for correction."""
    file_data = await file.read()
    doc = await doc_service.upload_document(
        session=session,
        user=user,
        application_id=application_id,
        doc_type=doc_type,
        filename=file.filename or "document",
        content_type=file.content_type or "",
        file_data=file_data,
    )
    if doc is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found",
        )
    return DocumentResponse.model_validate(doc)


@router.get(
    "/applications/{application_id}/documents",
    response_model=DocumentListResponse,
    dependencies=[Depends(require_roles(*_ALL_AUTHENTICATED))],
)
async def list_documents(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DocumentListResponse:
    documents = await doc_service.list_documents(session, user, application_id)
    if documents is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found",
        )
    items = [DocumentResponse.model_validate(doc) for doc in documents]
    return DocumentListResponse(data=items, count=len(items))


@router.get(
    "/documents/{document_id}",
    response_model=DocumentResponse,
    dependencies=[Depends(require_roles(*_ALL_AUTHENTICATED))],
)
async def get_document(
    document_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DocumentResponse:
    doc = await doc_service.get_document(session, user, document_id)
    if doc is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found",
        )
    return DocumentResponse.model_validate(doc)
