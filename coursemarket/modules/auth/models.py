from __future__ import annotations

import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coursemarket.db.base import Base
from coursemarket.db.mixins import TimestampMixin

if TYPE_CHECKING:
    from coursemarket.modules.courses.models import Course
    from coursemarket.modules.enrollments.models import Enrollment
    from coursemarket.modules.payments.models import Purchase


class UserRole(str, enum.Enum):
    student = "student"
    instructor = "instructor"
    admin = "admin"


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )

    # null for accounts created through an OAuth provider
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role"),
        default=UserRole.student,
        server_default=UserRole.student.value,
        nullable=False,
    )

    google_id: Mapped[str | None] = mapped_column(
        String(255), unique=True, nullable=True
    )
    facebook_id: Mapped[str | None] = mapped_column(
        String(255), unique=True, nullable=True
    )

    suspended: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="0", nullable=False
    )
    deleted: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="0", nullable=False
    )

    # relationships
    purchases: Mapped[list["Purchase"]] = relationship(
        "Purchase",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    enrollments: Mapped[list["Enrollment"]] = relationship(
        "Enrollment",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    courses_created: Mapped[list["Course"]] = relationship(
        "Course",
        back_populates="instructor",
        foreign_keys="Course.instructor_id",
    )

    @property
    def is_active(self) -> bool:
        return not (self.suspended or self.deleted)
