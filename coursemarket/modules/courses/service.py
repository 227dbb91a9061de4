from __future__ import annotations

import math
import uuid
from typing import Optional

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursemarket.core.access import ensure_can_modify, ensure_content_access
from coursemarket.core.config import settings
from coursemarket.core.content_constants import COURSE_MEDIA_PREFIX, LESSON_MEDIA_PREFIX
from coursemarket.core.logging import get_logger
from coursemarket.core.responses import server_error
from coursemarket.integrations.storage import StorageClient, get_storage_client
from coursemarket.modules.auth.models import User
from coursemarket.modules.categories.repository import CategoryRepository
from coursemarket.modules.courses import content_tree
from coursemarket.modules.courses.media import discard_objects, store_uploads, validate_uploads
from coursemarket.modules.courses.models import Course, Lesson, Module
from coursemarket.modules.courses.repository import CourseRepository
from coursemarket.modules.enrollments.models import EnrollmentStatus
from coursemarket.schemas.course import LessonCreate, ModuleCreate

logger = get_logger(__name__)


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class CourseService:
    """Service layer for courses and their module/lesson tree."""

    def __init__(self, db: Session, storage: Optional[StorageClient] = None):
        self.db = db
        self.course_repo = CourseRepository(db)
        self.category_repo = CategoryRepository(db)
        self._storage = storage

    @property
    def storage(self) -> StorageClient:
        if self._storage is None:
            self._storage = get_storage_client()
        return self._storage

    # ---------- helpers ----------

    def _load_course(self, course_id: uuid.UUID) -> Course:
        course = self.course_repo.get_by_id(course_id)
        if not course:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Course not found",
            )
        return course

    @staticmethod
    def _load_module(course: Course, module_id: uuid.UUID) -> Module:
        module = content_tree.find_module(course, module_id)
        if not module:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Module not found",
            )
        return module

    @staticmethod
    def _load_lesson(module: Module, lesson_id: uuid.UUID) -> Lesson:
        lesson = content_tree.find_lesson(module.lessons, lesson_id)
        if not lesson:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Lesson not found",
            )
        return lesson

    def _check_category(self, category_id: Optional[uuid.UUID]) -> None:
        if category_id is None or not self.category_repo.get_by_id(category_id):
            raise _bad_request("Invalid category")

    def _check_title(self, title: str, course_id: Optional[uuid.UUID] = None) -> None:
        existing = self.course_repo.get_by_title(title)
        if existing and existing.id != course_id:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Course title already exists.",
            )

    @staticmethod
    def _check_numbers(price: Optional[float], max_students: Optional[int]) -> None:
        if price is not None and not math.isfinite(price):
            raise _bad_request("Price must be a finite number")
        if price is not None and price < 0:
            raise _bad_request("Price must not be negative")
        if max_students is not None and max_students < 1:
            raise _bad_request("max_students must be at least 1")

    def _commit(self, message: str, stored_keys: list[str] | None = None) -> None:
        """Commit, or roll back and drop any objects stored for the failed write."""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            if stored_keys:
                discard_objects(self.storage, stored_keys)
            raise server_error(message, e)

    # ---------- course ----------

    def create_course(
        self,
        user: User,
        title: Optional[str],
        description: Optional[str],
        category_id: Optional[uuid.UUID],
        duration: Optional[str],
        price: float = 0,
        max_students: Optional[int] = None,
        content: str = "",
        modules: Optional[list[ModuleCreate]] = None,
        uploads: Optional[list[UploadFile]] = None,
    ) -> Course:
        if not title or not description or not category_id or not duration:
            raise _bad_request("Please provide all required fields")

        self._check_category(category_id)
        self._check_title(title)

        if max_students is None:
            max_students = settings.DEFAULT_MAX_STUDENTS
        self._check_numbers(price, max_students)

        files = validate_uploads(uploads)

        course = self.course_repo.create(
            title=title,
            description=description,
            content=content or "",
            category_id=category_id,
            duration=duration,
            price=price,
            max_students=max_students,
            instructor_id=user.id,
        )
        course.modules = [content_tree.build_module(m) for m in (modules or [])]

        assets = store_uploads(self.storage, files, f"{COURSE_MEDIA_PREFIX}/{course.id}")
        course.attachments.extend(assets)

        self._commit("Error creating course", [a.key for a in assets])
        self.db.refresh(course)

        logger.info(
            "created course",
            course_id=str(course.id),
            title=course.title,
            instructor_id=str(user.id),
        )
        return course

    def list_courses(self, category_id: Optional[uuid.UUID] = None) -> list[Course]:
        return self.course_repo.list_all(category_id=category_id)

    def get_course(self, course_id: uuid.UUID, user: User) -> Course:
        course = self._load_course(course_id)
        ensure_content_access(
            user,
            course,
            message="Payment required to view this course",
            with_preview=True,
        )
        return course

    def update_course(self, course_id: uuid.UUID, user: User, **update_data) -> Course:
        """Partial update; fields that are not given keep their stored value."""
        course = self._load_course(course_id)
        ensure_can_modify(user, course, "You are not allowed to update this course")

        # nulls in the payload mean "keep"
        update_data = {k: v for k, v in update_data.items() if v is not None}

        if "title" in update_data:
            self._check_title(update_data["title"], course.id)
        if "category_id" in update_data:
            self._check_category(update_data["category_id"])

        self._check_numbers(update_data.get("price"), update_data.get("max_students"))
        max_students = update_data.get("max_students")
        if max_students is not None and max_students < course.enrolled_count:
            raise _bad_request("max_students cannot be lower than the current enrollment")

        stale_keys: list[str] = []
        modules = update_data.pop("modules", None)
        if modules is not None:
            stale_keys = [
                asset.key
                for module in course.modules
                for lesson in content_tree.iter_lessons(module.lessons)
                for asset in lesson.multimedia
            ]
            course.modules = [
                content_tree.build_module(ModuleCreate.model_validate(m)) for m in modules
            ]

        try:
            self.course_repo.update(course, **update_data)
            if update_data.get("price") == 0:
                # a course that turns free no longer waits on payments
                for enrollment in course.enrollments:
                    enrollment.status = EnrollmentStatus.paid
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise server_error("Error updating course", e)
        discard_objects(self.storage, stale_keys)
        self.db.refresh(course)

        logger.info("updated course", course_id=str(course.id), fields=sorted(update_data))
        return course

    def delete_course(self, course_id: uuid.UUID, user: User) -> None:
        course = self._load_course(course_id)
        ensure_can_modify(user, course, "You are not allowed to delete this course")

        keys = content_tree.media_keys(course)
        self.course_repo.delete(course)
        self._commit("Error deleting course")
        discard_objects(self.storage, keys)

        logger.info("deleted course", course_id=str(course_id))

    # ---------- modules ----------

    def add_module(self, course_id: uuid.UUID, user: User, data: ModuleCreate) -> Module:
        course = self._load_course(course_id)
        ensure_can_modify(user, course, "Only the course instructor or an admin can add modules")

        module = content_tree.build_module(data)
        course.modules.append(module)
        self._commit("Error adding module")
        self.db.refresh(module)

        logger.info("added module", course_id=str(course.id), module_id=str(module.id))
        return module

    def list_modules(self, course_id: uuid.UUID, user: User) -> list[Module]:
        course = self._load_course(course_id)
        ensure_content_access(user, course, message="Payment required to view modules")
        return list(course.modules)

    def get_module(self, course_id: uuid.UUID, module_id: uuid.UUID, user: User) -> Module:
        course = self._load_course(course_id)
        ensure_content_access(user, course, message="Payment required to view this module")
        return self._load_module(course, module_id)

    def delete_module(self, course_id: uuid.UUID, module_id: uuid.UUID, user: User) -> None:
        course = self._load_course(course_id)
        ensure_can_modify(
            user,
            course,
            "Only the instructor who created the course or an admin can delete a module",
        )

        module = self._load_module(course, module_id)
        keys = [
            asset.key
            for lesson in content_tree.iter_lessons(module.lessons)
            for asset in lesson.multimedia
        ]
        content_tree.remove_module(course, module_id)
        self._commit("Error deleting module")
        discard_objects(self.storage, keys)

        logger.info("deleted module", course_id=str(course_id), module_id=str(module_id))

    # ---------- lessons ----------

    def add_lesson(
        self,
        course_id: uuid.UUID,
        module_id: uuid.UUID,
        user: User,
        data: LessonCreate,
        parent_lesson_id: Optional[uuid.UUID] = None,
        uploads: Optional[list[UploadFile]] = None,
    ) -> Lesson:
        """Append a lesson to a module, or as a sub-lesson of ``parent_lesson_id``."""
        course = self._load_course(course_id)
        ensure_can_modify(user, course, "Only the course instructor or an admin can add lessons")

        module = self._load_module(course, module_id)
        parent = self._load_lesson(module, parent_lesson_id) if parent_lesson_id else None

        files = validate_uploads(uploads)

        lesson = content_tree.build_lesson(data)
        if parent is not None:
            parent.children.append(lesson)
        else:
            module.lessons.append(lesson)
        self.db.flush()

        assets = store_uploads(self.storage, files, f"{LESSON_MEDIA_PREFIX}/{lesson.id}")
        lesson.multimedia.extend(assets)

        self._commit("Error adding lesson", [a.key for a in assets])
        self.db.refresh(lesson)

        logger.info(
            "added lesson",
            course_id=str(course.id),
            module_id=str(module.id),
            lesson_id=str(lesson.id),
            parent_id=str(parent.id) if parent else None,
            files=len(assets),
        )
        return lesson

    def list_lessons(self, course_id: uuid.UUID, user: User) -> list[Lesson]:
        """Top-level lessons of every module, in module order, with their sub-lessons."""
        course = self._load_course(course_id)
        ensure_content_access(user, course, message="Payment required to view lessons")
        return [lesson for module in course.modules for lesson in module.lessons]

    def get_lesson(
        self,
        course_id: uuid.UUID,
        module_id: uuid.UUID,
        lesson_id: uuid.UUID,
        user: User,
    ) -> Lesson:
        course = self._load_course(course_id)
        ensure_content_access(user, course, message="Payment required to view this lesson")
        module = self._load_module(course, module_id)
        return self._load_lesson(module, lesson_id)

    def delete_lesson(
        self,
        course_id: uuid.UUID,
        module_id: uuid.UUID,
        lesson_id: uuid.UUID,
        user: User,
    ) -> None:
        course = self._load_course(course_id)
        ensure_can_modify(
            user,
            course,
            "Only the instructor who created the course or an admin can delete a lesson",
        )

        module = self._load_module(course, module_id)
        lesson = self._load_lesson(module, lesson_id)
        keys = [
            asset.key
            for node in content_tree.iter_lessons([lesson])
            for asset in node.multimedia
        ]

        content_tree.remove_lesson(module.lessons, lesson_id)
        self._commit("Error deleting lesson")
        discard_objects(self.storage, keys)

        logger.info(
            "deleted lesson",
            course_id=str(course_id),
            module_id=str(module_id),
            lesson_id=str(lesson_id),
        )
