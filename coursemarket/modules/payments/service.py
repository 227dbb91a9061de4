from __future__ import annotations

import uuid
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursemarket.core.config import settings
from coursemarket.core.logging import get_logger
from coursemarket.core.responses import server_error
from coursemarket.integrations.paystack import PaystackClient, PaystackError
from coursemarket.modules.auth.models import User
from coursemarket.modules.auth.repository import UserRepository
from coursemarket.modules.courses.repository import CourseRepository
from coursemarket.modules.enrollments.repository import EnrollmentRepository
from coursemarket.modules.payments.models import PaymentStatus, Purchase
from coursemarket.modules.payments.repository import PurchaseRepository

logger = get_logger(__name__)


def _to_minor_units(price: float) -> int:
    return int(round(price * 100))


def _parse_uuid(value: Any) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class PaymentService:
    """
    Course payments through Paystack.

    ``initialize_payment`` opens a gateway transaction and records a pending
    purchase. ``verify_payment`` asks the gateway for the outcome and, on success,
    marks the purchase successful and the enrollment paid in a single commit.
    Re-verifying an already reconciled reference writes the same state again.
    """

    def __init__(self, db: Session, gateway: PaystackClient):
        self.db = db
        self.gateway = gateway
        self.user_repo = UserRepository(db)
        self.course_repo = CourseRepository(db)
        self.enrollment_repo = EnrollmentRepository(db)
        self.purchase_repo = PurchaseRepository(db)

    async def initialize_payment(self, course_id: uuid.UUID, user: User) -> dict[str, str]:
        course = self.course_repo.get_by_id(course_id)
        if not course:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Course not found",
            )

        if course.price <= 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This course is free, no payment is required",
            )

        if self.purchase_repo.get_successful(user.id, course.id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="You have already purchased this course",
            )

        enrolled = self.enrollment_repo.get(user.id, course.id) is not None
        if not enrolled and course.is_full:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Course is already full",
            )

        amount = _to_minor_units(course.price)
        try:
            data = await self.gateway.initialize_transaction(
                email=user.email,
                amount=amount,
                metadata={"userId": str(user.id), "courseId": str(course.id)},
                callback_url=settings.PAYSTACK_CALLBACK_URL,
            )
            reference = data["reference"]
            authorization_url = data["authorization_url"]
        except (PaystackError, KeyError) as e:
            logger.error(
                "payment initialization failed",
                course_id=str(course.id),
                user_id=str(user.id),
                exc_info=e,
            )
            raise server_error("Error initializing payment", e)

        try:
            self.purchase_repo.create(user.id, course.id, reference, amount)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise server_error("Error initializing payment", e)

        logger.info(
            "payment initialized",
            reference=reference,
            course_id=str(course.id),
            user_id=str(user.id),
            amount=amount,
        )
        return {"reference": reference, "authorization_url": authorization_url}

    async def verify_payment(self, reference: Optional[str]) -> Purchase:
        if not reference:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing transaction reference",
            )

        try:
            data = await self.gateway.verify_transaction(reference)
        except PaystackError as e:
            logger.error("payment verification failed", reference=reference, exc_info=e)
            raise server_error("Error verifying payment", e)

        gateway_status = data.get("status")
        if gateway_status == "abandoned":
            logger.warning("payment abandoned", reference=reference)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Payment was not completed",
            )
        if gateway_status != "success":
            logger.warning("payment not successful", reference=reference, status=gateway_status)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Payment verification failed",
            )

        metadata = data.get("metadata") or {}
        user_id = _parse_uuid(metadata.get("userId"))
        course_id = _parse_uuid(metadata.get("courseId"))
        user = self.user_repo.get_by_id(user_id) if user_id else None
        course = self.course_repo.get_by_id(course_id) if course_id else None
        if not user or not course:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Course or User not found",
            )

        purchase = self.purchase_repo.get_for_user_course(user.id, course.id, reference)
        if not purchase:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User course not found",
            )

        try:
            purchase.payment_status = PaymentStatus.success
            self.enrollment_repo.mark_paid(user.id, course.id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise server_error("Error updating payment records", e)

        self.db.refresh(purchase)
        logger.info(
            "payment verified",
            reference=reference,
            user_id=str(user.id),
            course_id=str(course.id),
        )
        return purchase

    def list_my_purchases(self, user: User) -> list[Purchase]:
        return self.purchase_repo.list_by_user(user.id)
