from __future__ import annotations

import uuid

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from coursemarket.core.logging import get_logger
from coursemarket.core.responses import server_error
from coursemarket.modules.auth.models import User
from coursemarket.modules.courses.repository import CourseRepository
from coursemarket.modules.enrollments.models import Enrollment, EnrollmentStatus
from coursemarket.modules.enrollments.repository import EnrollmentRepository
from coursemarket.modules.payments.repository import PurchaseRepository

logger = get_logger(__name__)


class EnrollmentService:
    """Service layer for enrollment operations."""

    def __init__(self, db: Session):
        self.db = db
        self.course_repo = CourseRepository(db)
        self.enrollment_repo = EnrollmentRepository(db)
        self.purchase_repo = PurchaseRepository(db)

    def enroll(self, course_id: uuid.UUID, user: User) -> Enrollment:
        """
        Enroll the caller in a course.

        The duplicate check runs before the capacity check, so an enrolled user
        asking again on a full course still gets 409. Free courses and courses the
        user already paid for start out ``paid``; everything else is ``pending``.
        """
        course = self.course_repo.get_by_id(course_id)
        if not course:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Course not found",
            )

        if self.enrollment_repo.get(user.id, course.id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="You are already enrolled in this course",
            )

        if self.enrollment_repo.count_by_course(course.id) >= course.max_students:
            logger.info("enrollment rejected, course full", course_id=str(course.id))
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Course is already full",
            )

        paid = course.price == 0 or self.purchase_repo.get_successful(user.id, course.id)
        enrollment_status = EnrollmentStatus.paid if paid else EnrollmentStatus.pending

        try:
            enrollment = self.enrollment_repo.create(user.id, course.id, enrollment_status)
            self.db.commit()
        except IntegrityError:
            # lost a race against a concurrent request for the same user
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="You are already enrolled in this course",
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise server_error("Error enrolling in course", e)

        self.db.refresh(enrollment)
        logger.info(
            "enrolled user",
            user_id=str(user.id),
            course_id=str(course.id),
            status=enrollment.status.value,
        )
        return enrollment

    def list_my_enrollments(self, user: User) -> list[Enrollment]:
        return self.enrollment_repo.list_by_user(user.id)
