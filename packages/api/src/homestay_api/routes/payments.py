# This project was developed with assistance from AI tools.
"""Fee payment routes."""

from homestay_db import get_db
from homestay_db.enums import UserRole
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.payment import PaymentCallbackRequest, PaymentListResponse, PaymentResponse
from ..services import payment as payment_service

router = APIRouter()

_PAYER_ROLES = (UserRole.PROPERTY_OWNER, UserRole.ADMIN)

_VIEW_ROLES = (
    UserRole.ADMIN,
    UserRole.PROPERTY_OWNER,
    UserRole.DEALING_ASSISTANT,
    UserRole.DISTRICT_TOURISM_OFFICER,
    UserRole.STATE_OFFICER,
)


@router.post(
    "/applications/{application_id}/payments",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_PAYER_ROLES))],
)
async def initiate_payment(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> PaymentResponse:
    """Start a payment for the application's total fee."""
    payment = await payment_service.initiate_payment(session, user, application_id)
    if payment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found",
        )
    return PaymentResponse.model_validate(payment)


@router.get(
    "/applications/{application_id}/payments",
    response_model=PaymentListResponse,
    dependencies=[Depends(require_roles(*_VIEW_ROLES))],
)
async def list_payments(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> PaymentListResponse:
    payments = await payment_service.list_payments(session, user, application_id)
    if payments is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found",
        )
    items = [PaymentResponse.model_validate(p) for p in payments]
    return PaymentListResponse(data=items, count=len(items))


@router.post(
    "/payments/{payment_id}/callback",
    response_model=PaymentResponse,
    dependencies=[Depends(require_roles(*_PAYER_ROLES))],
)
async def payment_callback(
    payment_id: int,
    body: PaymentCallbackRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> PaymentResponse:
    """Settle a payment from the gateway's result. Repeated callbacks are no-ops."""
    payment = await payment_service.process_callback(
        session,
        user,
        payment_id,
        success=body.success,
        gateway_reference=body.gateway_reference,
        response=body.response,
    )
    if payment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found",
        )
    return PaymentResponse.model_validate(payment)
