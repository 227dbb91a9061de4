from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.orm import Session

from coursemarket.modules.enrollments.models import Enrollment, EnrollmentStatus


class EnrollmentRepository:
    """Repository for Enrollment entity."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: uuid.UUID, course_id: uuid.UUID) -> Optional[Enrollment]:
        return (
            self.db.query(Enrollment)
            .filter(Enrollment.user_id == user_id, Enrollment.course_id == course_id)
            .first()
        )

    def list_by_user(self, user_id: uuid.UUID) -> list[Enrollment]:
        return (
            self.db.query(Enrollment)
            .filter(Enrollment.user_id == user_id)
            .order_by(Enrollment.enrolled_at.desc())
            .all()
        )

    def count_by_course(self, course_id: uuid.UUID) -> int:
        return self.db.query(Enrollment).filter(Enrollment.course_id == course_id).count()

    def create(
        self,
        user_id: uuid.UUID,
        course_id: uuid.UUID,
        status: EnrollmentStatus = EnrollmentStatus.pending,
    ) -> Enrollment:
        enrollment = Enrollment(user_id=user_id, course_id=course_id, status=status)
        self.db.add(enrollment)
        self.db.flush()
        return enrollment

    def mark_paid(self, user_id: uuid.UUID, course_id: uuid.UUID) -> Enrollment:
        """Set the enrollment to paid, creating it when the user is not enrolled yet."""
        enrollment = self.get(user_id, course_id)
        if enrollment is None:
            return self.create(user_id, course_id, EnrollmentStatus.paid)
        enrollment.status = EnrollmentStatus.paid
        self.db.flush()
        return enrollment
