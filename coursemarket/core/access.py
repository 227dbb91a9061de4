"""
Course access control.

Three gates are applied by the services before touching course data:

* role gate      - ``is_authorized`` decides whether a role is in the permitted set;
* ownership gate - only the owning instructor or an admin may mutate a course;
* content gate   - everyone else needs an enrollment, and a ``paid`` one unless the
                   course is free, to read course content.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Optional

from fastapi import HTTPException, status

from coursemarket.core.logging import get_logger
from coursemarket.core.responses import payment_required
from coursemarket.modules.auth.models import User, UserRole
from coursemarket.modules.courses.models import Course
from coursemarket.modules.enrollments.models import Enrollment, EnrollmentStatus
from coursemarket.schemas.course import CoursePreview

logger = get_logger(__name__)


def is_authorized(account_role: UserRole | str, required_roles: Iterable[UserRole | str]) -> bool:
    role = UserRole(account_role)
    return role in {UserRole(r) for r in required_roles}


def is_course_owner(user: User, course: Course) -> bool:
    """Owning instructor or admin."""
    return user.role == UserRole.admin or course.instructor_id == user.id


def find_enrollment(course: Course, user: User) -> Optional[Enrollment]:
    for enrollment in course.enrollments:
        if enrollment.user_id == user.id:
            return enrollment
    return None


def course_preview(course: Course) -> dict[str, Any]:
    return CoursePreview.model_validate(course).model_dump(mode="json")


def ensure_can_modify(user: User, course: Course, message: str) -> None:
    if not is_course_owner(user, course):
        logger.warning(
            "ownership check failed",
            user_id=str(user.id),
            course_id=str(course.id),
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message)


def ensure_content_access(
    user: User,
    course: Course,
    message: str = "Payment required to view this content",
    with_preview: bool = False,
) -> None:
    """Raise 403 for callers without an enrollment and 402 for unpaid ones.

    Any enrollment opens a free course, whatever its recorded status.
    """
    if is_course_owner(user, course):
        return

    enrollment = find_enrollment(course, user)
    if enrollment is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You must enroll in this course first",
        )

    if enrollment.status != EnrollmentStatus.paid and course.price > 0:
        logger.info(
            "content gated pending payment",
            user_id=str(user.id),
            course_id=str(course.id),
        )
        raise payment_required(message, course_preview(course) if with_preview else None)
