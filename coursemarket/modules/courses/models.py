from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, JSON, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coursemarket.db.base import Base
from coursemarket.db.mixins import TimestampMixin

if TYPE_CHECKING:
    from coursemarket.modules.auth.models import User
    from coursemarket.modules.categories.models import Category
    from coursemarket.modules.enrollments.models import Enrollment


class Course(TimestampMixin, Base):
    __tablename__ = "courses"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    title: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, default="", nullable=False)
    duration: Mapped[str] = mapped_column(String(100), nullable=False)

    # major currency units; the gateway is charged price * 100
    price: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False), default=0, nullable=False
    )

    max_students: Mapped[int] = mapped_column(Integer, nullable=False)

    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )

    instructor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    instructor: Mapped["User"] = relationship(
        "User",
        back_populates="courses_created",
        foreign_keys=[instructor_id],
    )

    category: Mapped["Category"] = relationship(
        "Category",
        back_populates="courses",
    )

    modules: Mapped[list["Module"]] = relationship(
        "Module",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Module.order_index",
    )

    attachments: Mapped[list["MediaAsset"]] = relationship(
        "MediaAsset",
        back_populates="course",
        cascade="all, delete-orphan",
    )

    enrollments: Mapped[list["Enrollment"]] = relationship(
        "Enrollment",
        back_populates="course",
        cascade="all, delete-orphan",
    )

    @property
    def enrolled_count(self) -> int:
        return len(self.enrollments)

    @property
    def is_full(self) -> bool:
        return self.enrolled_count >= self.max_students


class Module(TimestampMixin, Base):
    __tablename__ = "modules"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    course_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    course: Mapped["Course"] = relationship(
        "Course",
        back_populates="modules",
    )

    # top-level lessons only; sub-lessons hang off Lesson.children
    lessons: Mapped[list["Lesson"]] = relationship(
        "Lesson",
        back_populates="module",
        cascade="all, delete-orphan",
        order_by="Lesson.order_index",
    )

    quizzes: Mapped[list["Quiz"]] = relationship(
        "Quiz",
        back_populates="module",
        cascade="all, delete-orphan",
    )


class Lesson(TimestampMixin, Base):
    """A node of the lesson tree. Exactly one of module_id / parent_id is set."""

    __tablename__ = "lessons"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    module_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("modules.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, default="", nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    module: Mapped["Module | None"] = relationship(
        "Module",
        back_populates="lessons",
    )

    parent: Mapped["Lesson | None"] = relationship(
        "Lesson",
        back_populates="children",
        remote_side=[id],
    )

    children: Mapped[list["Lesson"]] = relationship(
        "Lesson",
        back_populates="parent",
        cascade="all, delete-orphan",
        order_by="Lesson.order_index",
    )

    multimedia: Mapped[list["MediaAsset"]] = relationship(
        "MediaAsset",
        back_populates="lesson",
        cascade="all, delete-orphan",
    )

    quizzes: Mapped[list["Quiz"]] = relationship(
        "Quiz",
        back_populates="lesson",
        cascade="all, delete-orphan",
    )


class Quiz(TimestampMixin, Base):
    __tablename__ = "quizzes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    module_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("modules.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    lesson_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    question: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    answer: Mapped[str | None] = mapped_column(String(255), nullable=True)

    module: Mapped["Module | None"] = relationship("Module", back_populates="quizzes")
    lesson: Mapped["Lesson | None"] = relationship("Lesson", back_populates="quizzes")


class MediaAsset(TimestampMixin, Base):
    """Uploaded file attached to a course or to a lesson."""

    __tablename__ = "media_assets"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    course_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    lesson_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    key: Mapped[str] = mapped_column(String(1024), nullable=False)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)

    course: Mapped["Course | None"] = relationship("Course", back_populates="attachments")
    lesson: Mapped["Lesson | None"] = relationship("Lesson", back_populates="multimedia")
