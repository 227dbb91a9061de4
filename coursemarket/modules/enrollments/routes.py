# coursemarket/modules/enrollments/routes.py
from uuid import UUID
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursemarket.core.responses import ApiResponse
from coursemarket.db.deps import get_current_user, get_db
from coursemarket.modules.auth.models import User
from coursemarket.modules.enrollments.service import EnrollmentService
from coursemarket.schemas.enrollment import EnrollmentRead

router = APIRouter(prefix="/courses", tags=["enrollments"])


@router.get("/enrollments/me", response_model=ApiResponse[List[EnrollmentRead]])
def list_my_enrollments(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    enrollments = EnrollmentService(db).list_my_enrollments(user)
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="Enrollments retrieved",
        data=[EnrollmentRead.model_validate(e) for e in enrollments],
    )


@router.post(
    "/{course_id}/enroll",
    response_model=ApiResponse[EnrollmentRead],
    status_code=status.HTTP_201_CREATED,
)
def enroll_in_course(
    course_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    enrollment = EnrollmentService(db).enroll(course_id, user)
    return ApiResponse(
        code=status.HTTP_201_CREATED,
        message="Student enrolled successfully",
        data=EnrollmentRead.model_validate(enrollment),
    )
