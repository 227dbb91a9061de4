from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.orm import Session

from coursemarket.modules.payments.models import PaymentStatus, Purchase


class PurchaseRepository:
    """Repository for Purchase entity."""

    def __init__(self, db: Session):
        self.db = db

    def get_for_user_course(
        self,
        user_id: uuid.UUID,
        course_id: uuid.UUID,
        reference: str,
    ) -> Optional[Purchase]:
        return (
            self.db.query(Purchase)
            .filter(
                Purchase.user_id == user_id,
                Purchase.course_id == course_id,
                Purchase.reference == reference,
            )
            .first()
        )

    def get_successful(self, user_id: uuid.UUID, course_id: uuid.UUID) -> Optional[Purchase]:
        return (
            self.db.query(Purchase)
            .filter(
                Purchase.user_id == user_id,
                Purchase.course_id == course_id,
                Purchase.payment_status == PaymentStatus.success,
            )
            .first()
        )

    def list_by_user(self, user_id: uuid.UUID) -> list[Purchase]:
        return (
            self.db.query(Purchase)
            .filter(Purchase.user_id == user_id)
            .order_by(Purchase.created_at.desc())
            .all()
        )

    def create(
        self,
        user_id: uuid.UUID,
        course_id: uuid.UUID,
        reference: str,
        amount: int,
    ) -> Purchase:
        purchase = Purchase(
            user_id=user_id,
            course_id=course_id,
            reference=reference,
            amount=amount,
            payment_status=PaymentStatus.pending,
        )
        self.db.add(purchase)
        self.db.flush()
        return purchase
