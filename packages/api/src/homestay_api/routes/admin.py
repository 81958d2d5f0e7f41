# This project was developed with assistance from AI tools.
"""Admin endpoints for demo data seeding and audit trail queries."""

from homestay_db import get_db
from homestay_db.enums import UserRole
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import require_roles
from ..schemas.admin import (
    AuditByApplicationResponse,
    AuditChainVerifyResponse,
    AuditEventItem,
    SeedResponse,
    SeedStatusResponse,
)
from ..services.audit import get_events_by_application, verify_audit_chain
from ..services.seed.seeder import get_seed_status, seed_demo_data

router = APIRouter()


@router.post(
    "/seed",
    response_model=SeedResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def seed_data(
    force: bool = False,
    session: AsyncSession = Depends(get_db),
) -> SeedResponse:
    """Seed demo users, applications and grievances. Pass force=true to re-seed."""
    result = await seed_demo_data(session, force=force)
    return SeedResponse(**result)


@router.get(
    "/seed/status",
    response_model=SeedStatusResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def seed_status(
    session: AsyncSession = Depends(get_db),
) -> SeedStatusResponse:
    result = await get_seed_status(session)
    return SeedStatusResponse(**result)


@router.get(
    "/audit",
    response_model=AuditByApplicationResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.STATE_OFFICER))],
)
async def audit_by_application(
    application_id: int = Query(..., description="Application whose trail to return"),
    event_type: list[str] | None = Query(default=None),
    session: AsyncSession = Depends(get_db),
) -> AuditByApplicationResponse:
    """Audit trail of one application in chronological order."""
    events = await get_events_by_application(session, application_id, event_type)
    return AuditByApplicationResponse(
        application_id=application_id,
        count=len(events),
        events=[AuditEventItem.model_validate(e) for e in events],
    )


@router.get(
    "/audit/verify",
    response_model=AuditChainVerifyResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def verify_audit(
    session: AsyncSession = Depends(get_db),
) -> AuditChainVerifyResponse:
    """Verify audit trail hash chain integrity."""
    result = await verify_audit_chain(session)
    return AuditChainVerifyResponse(**result)
