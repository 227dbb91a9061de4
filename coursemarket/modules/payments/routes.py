# coursemarket/modules/payments/routes.py
from uuid import UUID
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursemarket.core.responses import ApiResponse
from coursemarket.db.deps import get_current_user, get_db, require_roles
from coursemarket.integrations.paystack import PaystackClient, get_paystack_client
from coursemarket.modules.auth.models import User, UserRole
from coursemarket.modules.payments.service import PaymentService
from coursemarket.schemas.payment import PaymentInitResponse, PurchaseRead, VerifyPaymentRequest

router = APIRouter(prefix="/payment", tags=["payments"])


def paystack_gateway() -> PaystackClient:
    return get_paystack_client()


@router.post(
    "/courses/{course_id}/initialize-payment",
    response_model=ApiResponse[PaymentInitResponse],
)
async def initialize_payment(
    course_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(UserRole.student)),
    gateway: PaystackClient = Depends(paystack_gateway),
):
    """Start a Paystack transaction; the client redirects to authorization_url."""
    data = await PaymentService(db, gateway).initialize_payment(course_id, user)
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="Payment initialized",
        data=PaymentInitResponse(**data),
    )


@router.post("/verify-payment", response_model=ApiResponse[PurchaseRead])
async def verify_payment(
    payload: VerifyPaymentRequest,
    db: Session = Depends(get_db),
    gateway: PaystackClient = Depends(paystack_gateway),
):
    purchase = await PaymentService(db, gateway).verify_payment(payload.reference)
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="Payment verified and records updated",
        data=PurchaseRead.model_validate(purchase),
    )


@router.get("/purchases", response_model=ApiResponse[List[PurchaseRead]])
def list_purchases(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    gateway: PaystackClient = Depends(paystack_gateway),
):
    purchases = PaymentService(db, gateway).list_my_purchases(user)
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="Purchases retrieved",
        data=[PurchaseRead.model_validate(p) for p in purchases],
    )
