from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coursemarket.db.base import Base
from coursemarket.db.mixins import TimestampMixin

if TYPE_CHECKING:
    from coursemarket.modules.courses.models import Course


ALLOWED_CATEGORIES = (
    "Web Development",
    "Data Science",
    "Mobile Development",
    "Cloud Computing",
    "Artificial Intelligence",
    "Cybersecurity",
    "Business and Entrepreneurship",
    "Graphic Design",
    "Digital Marketing",
    "Software Engineering",
)


class Category(TimestampMixin, Base):
    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    courses: Mapped[list["Course"]] = relationship(
        "Course",
        back_populates="category",
    )
