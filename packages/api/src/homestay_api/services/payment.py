# This project was developed with assistance from AI tools.
"""Registration fee payments.

Payments are initiated by the owner and settled by the gateway callback.
Under the ``on_approval`` workflow the fee is due after the DTDO accepts
the inspection report; a successful payment confirms approval and issues
the RC. Under ``upfront`` the fee is paid on the draft, which moves to
``paid_pending_submit``.
"""

import logging
import secrets
from datetime import UTC, datetime

from homestay_db import Application, Payment
from homestay_db.enums import (
    ApplicationStatus,
    PaymentPurpose,
    PaymentStatus,
    WorkflowAction,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.auth import UserContext
from .application import AMENDMENT_KINDS, get_application
from .audit import write_audit_event
from .certificate import record_approval, stamp_approval
from .notification import notify
from .scope import apply_data_scope
from .workflow import WorkflowRuleError, apply_action, check_transition, commit_or_conflict

logger = logging.getLogger(__name__)

S = ApplicationStatus

PAYABLE_STATUSES = frozenset({S.VERIFIED_FOR_PAYMENT, S.PAYMENT_FAILED})


def generate_transaction_id(now: datetime | None = None) -> str:
    """``HPT{epoch millis}{4 digits}``."""
    now = now or datetime.now(UTC)
    return f"HPT{int(now.timestamp() * 1000)}{secrets.randbelow(10_000):04d}"


def _is_payable(app: Application) -> bool:
    if app.status in PAYABLE_STATUSES:
        return True
    return settings.PAYMENT_WORKFLOW == "upfront" and app.status == S.DRAFT


async def list_payments(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> list[Payment] | None:
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    result = await session.execute(
        select(Payment).where(Payment.application_id == app.id).order_by(Payment.id.desc())
    )
    return list(result.scalars().all())


async def get_payment(
    session: AsyncSession,
    user: UserContext,
    payment_id: int,
) -> Payment | None:
    stmt = select(Payment).where(Payment.id == payment_id)
    stmt = apply_data_scope(stmt, user.data_scope, user, join_to_application=Payment.application)
    return (await session.execute(stmt)).unique().scalar_one_or_none()


async def initiate_payment(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> Payment | None:
    """Open a payment attempt for the application's total fee.

    Raises:
        WorkflowRuleError: the application is not awaiting payment, or
            carries no fee.
    """
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    if not _is_payable(app):
        raise WorkflowRuleError(
            f"Application in status '{app.status.value}' is not awaiting payment."
        )
    if not app.total_fee or app.total_fee <= 0:
        raise WorkflowRuleError("This application has no fee to pay.")

    purpose = (
        PaymentPurpose.UPGRADE
        if app.application_kind in AMENDMENT_KINDS
        else PaymentPurpose.REGISTRATION
    )
    payment = Payment(
        application_id=app.id,
        amount=app.total_fee,
        purpose=purpose,
        gateway="himkosh",
        transaction_id=generate_transaction_id(),
        status=PaymentStatus.INITIATED,
    )
    session.add(payment)
    app.payment_status = PaymentStatus.INITIATED
    await session.flush()

    await write_audit_event(
        session,
        event_type="payment_initiated",
        user=user,
        application_id=app.id,
        event_data={
            "payment_id": payment.id,
            "transaction_id": payment.transaction_id,
            "amount": str(payment.amount),
            "purpose": purpose.value,
        },
    )
    await commit_or_conflict(session)
    await session.refresh(payment)
    logger.info("Payment %s initiated for application %s", payment.transaction_id, app.id)
    return payment


async def process_callback(
    session: AsyncSession,
    user: UserContext,
    payment_id: int,
    *,
    success: bool,
    gateway_reference: str | None = None,
    response: dict | None = None,
) -> Payment | None:
    """Settle a payment from the gateway's result.

    A payment that is already settled is returned unchanged, so repeated
    callbacks are harmless.
    """
    payment = await get_payment(session, user, payment_id)
    if payment is None:
        return None
    if payment.status != PaymentStatus.INITIATED:
        logger.info("Ignoring repeated callback for payment %s", payment.transaction_id)
        return payment

    app = await get_application(session, user, payment.application_id)
    if app is None:
        return None

    now = datetime.now(UTC)
    gateway_response = dict(response or {})
    if gateway_reference:
        gateway_response["gateway_reference"] = gateway_reference
    payment.gateway_response = gateway_response or None
    context = {
        "application_number": app.application_number,
        "property_name": app.property_name,
        "amount": str(payment.amount),
    }

    if success:
        if app.status == S.DRAFT:
            check_transition(app.status, WorkflowAction.RECORD_UPFRONT_PAYMENT, user.role)
        else:
            check_transition(app.status, WorkflowAction.CONFIRM_PAYMENT, user.role)
        payment.status = PaymentStatus.SUCCESS
        payment.paid_at = now
        app.payment_status = PaymentStatus.SUCCESS
        if app.status == S.DRAFT:
            await apply_action(
                session,
                user,
                app,
                WorkflowAction.RECORD_UPFRONT_PAYMENT,
                event_data={"payment_id": payment.id},
            )
        else:
            stamp_approval(app)
            await apply_action(
                session,
                user,
                app,
                WorkflowAction.CONFIRM_PAYMENT,
                event_data={"payment_id": payment.id},
            )
            await record_approval(session, user, app)
            await notify(
                session,
                recipient_id=app.owner_id,
                template="application_approved",
                context={**context, "certificate_number": app.certificate_number},
                application_id=app.id,
            )
    else:
        payment.status = PaymentStatus.FAILED
        app.payment_status = PaymentStatus.FAILED
        if app.status == S.VERIFIED_FOR_PAYMENT:
            await apply_action(
                session,
                user,
                app,
                WorkflowAction.FAIL_PAYMENT,
                event_data={"payment_id": payment.id},
            )
        await notify(
            session,
            recipient_id=app.owner_id,
            template="payment_failed",
            context=context,
            application_id=app.id,
        )

    await write_audit_event(
        session,
        event_type="payment_completed" if success else "payment_failed",
        user=user,
        application_id=app.id,
        event_data={
            "payment_id": payment.id,
            "transaction_id": payment.transaction_id,
            "gateway_reference": gateway_reference,
        },
    )
    await commit_or_conflict(session)
    await session.refresh(payment)
    logger.info(
        "Payment %s settled: %s", payment.transaction_id, payment.status.value
    )
    return payment
