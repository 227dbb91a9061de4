# coursemarket/modules/courses/routes.py
from uuid import UUID
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from coursemarket.core.responses import ApiResponse, MessageResponse
from coursemarket.db.deps import get_current_user, get_db, require_roles
from coursemarket.modules.auth.models import User, UserRole
from coursemarket.modules.courses.service import CourseService
from coursemarket.schemas.course import (
    CourseRead,
    CourseSummary,
    CourseUpdate,
    LessonCreate,
    LessonRead,
    ModuleCreate,
    ModuleRead,
)

router = APIRouter(prefix="/courses", tags=["courses"])

_modules_adapter = TypeAdapter(List[ModuleCreate])


def _parse_modules(raw: Optional[str]) -> list[ModuleCreate]:
    """The multipart form carries the module tree as a JSON string."""
    if not raw:
        return []
    try:
        return _modules_adapter.validate_json(raw)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Invalid modules payload", "error": str(e)},
        )


# ---------- COURSES ----------


@router.post(
    "/create",
    response_model=ApiResponse[CourseRead],
    status_code=status.HTTP_201_CREATED,
)
def create_course(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category_id: Optional[UUID] = Form(None),
    duration: Optional[str] = Form(None),
    price: float = Form(0),
    max_students: Optional[int] = Form(None),
    content: str = Form(""),
    modules: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(UserRole.instructor, UserRole.admin)),
):
    """Create a course; the caller becomes its instructor."""
    course = CourseService(db).create_course(
        user=user,
        title=title,
        description=description,
        category_id=category_id,
        duration=duration,
        price=price,
        max_students=max_students,
        content=content,
        modules=_parse_modules(modules),
        uploads=files,
    )
    return ApiResponse(
        code=status.HTTP_201_CREATED,
        message="Course created successfully",
        data=CourseRead.model_validate(course),
    )


@router.get("", response_model=ApiResponse[List[CourseSummary]])
def list_courses(
    db: Session = Depends(get_db),
    category: Optional[UUID] = Query(
        default=None,
        description="Optional filter by category id",
    ),
):
    courses = CourseService(db).list_courses(category_id=category)
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="Courses retrieved successfully",
        data=[CourseSummary.model_validate(c) for c in courses],
    )


@router.get("/{course_id}", response_model=ApiResponse[CourseRead])
def get_course(
    course_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    course = CourseService(db).get_course(course_id, user)
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="Course retrieved successfully",
        data=CourseRead.model_validate(course),
    )


@router.put("/{course_id}", response_model=ApiResponse[CourseRead])
def update_course(
    course_id: UUID,
    payload: CourseUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    update_data = payload.model_dump(exclude_unset=True)
    course = CourseService(db).update_course(course_id, user, **update_data)
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="Course updated successfully",
        data=CourseRead.model_validate(course),
    )


@router.delete("/{course_id}", response_model=MessageResponse)
def delete_course(
    course_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    CourseService(db).delete_course(course_id, user)
    return MessageResponse(code=status.HTTP_200_OK, message="Course deleted successfully")


# ---------- MODULES ----------


@router.post(
    "/{course_id}/modules",
    response_model=ApiResponse[ModuleRead],
    status_code=status.HTTP_201_CREATED,
)
def add_module(
    course_id: UUID,
    payload: ModuleCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    module = CourseService(db).add_module(course_id, user, payload)
    return ApiResponse(
        code=status.HTTP_201_CREATED,
        message="Module added successfully",
        data=ModuleRead.model_validate(module),
    )


@router.get("/{course_id}/modules", response_model=ApiResponse[List[ModuleRead]])
def list_modules(
    course_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    modules = CourseService(db).list_modules(course_id, user)
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="Modules retrieved",
        data=[ModuleRead.model_validate(m) for m in modules],
    )


@router.get("/{course_id}/modules/{module_id}", response_model=ApiResponse[ModuleRead])
def get_module(
    course_id: UUID,
    module_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    module = CourseService(db).get_module(course_id, module_id, user)
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="Module retrieved",
        data=ModuleRead.model_validate(module),
    )


@router.delete("/{course_id}/modules/{module_id}", response_model=MessageResponse)
def delete_module(
    course_id: UUID,
    module_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    CourseService(db).delete_module(course_id, module_id, user)
    return MessageResponse(code=status.HTTP_200_OK, message="Module deleted successfully")


# ---------- LESSONS ----------


@router.get("/{course_id}/lessons", response_model=ApiResponse[List[LessonRead]])
def list_lessons(
    course_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    lessons = CourseService(db).list_lessons(course_id, user)
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="Lessons retrieved",
        data=[LessonRead.model_validate(lesson) for lesson in lessons],
    )


@router.post(
    "/{course_id}/modules/{module_id}/lessons",
    response_model=ApiResponse[LessonRead],
    status_code=status.HTTP_201_CREATED,
)
def add_lesson(
    course_id: UUID,
    module_id: UUID,
    title: str = Form(..., min_length=1),
    content: str = Form(""),
    order_index: int = Form(1),
    parent_lesson_id: Optional[UUID] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Add a lesson (or a sub-lesson when parent_lesson_id is set) with optional multimedia."""
    lesson = CourseService(db).add_lesson(
        course_id,
        module_id,
        user,
        LessonCreate(title=title, content=content, order_index=order_index),
        parent_lesson_id=parent_lesson_id,
        uploads=files,
    )
    return ApiResponse(
        code=status.HTTP_201_CREATED,
        message="Lesson added successfully",
        data=LessonRead.model_validate(lesson),
    )


@router.get(
    "/{course_id}/modules/{module_id}/lessons/{lesson_id}",
    response_model=ApiResponse[LessonRead],
)
def get_lesson(
    course_id: UUID,
    module_id: UUID,
    lesson_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    lesson = CourseService(db).get_lesson(course_id, module_id, lesson_id, user)
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="Lesson retrieved",
        data=LessonRead.model_validate(lesson),
    )


@router.delete(
    "/{course_id}/modules/{module_id}/lessons/{lesson_id}",
    response_model=MessageResponse,
)
def delete_lesson(
    course_id: UUID,
    module_id: UUID,
    lesson_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    CourseService(db).delete_lesson(course_id, module_id, lesson_id, user)
    return MessageResponse(code=status.HTTP_200_OK, message="Lesson deleted successfully")
