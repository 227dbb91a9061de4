from uuid import UUID
from typing import Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from coursemarket.modules.payments.models import PaymentStatus


class PaymentInitResponse(BaseModel):
    reference: str
    authorization_url: str


class VerifyPaymentRequest(BaseModel):
    reference: Optional[str] = None


class PurchaseRead(BaseModel):
    id: UUID
    course_id: Optional[UUID] = None
    payment_status: PaymentStatus
    reference: str
    amount: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
