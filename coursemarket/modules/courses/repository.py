from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.orm import Session

from coursemarket.modules.courses.models import Course


class CourseRepository:
    """Repository for Course entity with CRUD operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, course_id: uuid.UUID) -> Optional[Course]:
        """Get course by ID."""
        return self.db.query(Course).filter(Course.id == course_id).first()

    def get_by_title(self, title: str) -> Optional[Course]:
        return self.db.query(Course).filter(Course.title == title).first()

    def list_all(self, category_id: Optional[uuid.UUID] = None) -> list[Course]:
        """List all courses, newest first, optionally within one category."""
        query = self.db.query(Course)
        if category_id:
            query = query.filter(Course.category_id == category_id)
        return query.order_by(Course.created_at.desc()).all()

    def create(self, **kwargs) -> Course:
        """Create a new course."""
        course = Course(**kwargs)
        self.db.add(course)
        self.db.flush()
        return course

    def update(self, course: Course, **kwargs) -> Course:
        """Update course fields."""
        for key, value in kwargs.items():
            if hasattr(course, key):
                setattr(course, key, value)
        self.db.flush()
        return course

    def delete(self, course: Course) -> None:
        """Delete course."""
        self.db.delete(course)
        self.db.flush()
