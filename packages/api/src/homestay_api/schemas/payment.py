# This project was developed with assistance from AI tools.
"""Payment schemas."""

from datetime import datetime
from decimal import Decimal

from homestay_db.enums import PaymentPurpose, PaymentStatus
from pydantic import BaseModel, ConfigDict, Field


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    amount: Decimal
    purpose: PaymentPurpose
    gateway: str
    transaction_id: str
    status: PaymentStatus
    paid_at: datetime | None = None
    created_at: datetime | None = None


class PaymentListResponse(BaseModel):
    data: list[PaymentResponse]
    count: int


class PaymentCallbackRequest(BaseModel):
    """Result relayed from the treasury gateway."""

    success: bool
    gateway_reference: str | None = Field(default=None, max_length=100)
    response: dict | None = None
