from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.orm import Session

from coursemarket.modules.categories.models import Category
from coursemarket.modules.courses.models import Course


class CategoryRepository:
    """Repository for Category entity."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, category_id: uuid.UUID) -> Optional[Category]:
        return self.db.query(Category).filter(Category.id == category_id).first()

    def get_by_name(self, name: str) -> Optional[Category]:
        return self.db.query(Category).filter(Category.name == name).first()

    def list_all(self) -> list[Category]:
        return self.db.query(Category).order_by(Category.name.asc()).all()

    def create(self, name: str) -> Category:
        category = Category(name=name)
        self.db.add(category)
        self.db.flush()
        return category

    def delete(self, category: Category) -> None:
        self.db.delete(category)
        self.db.flush()

    def has_courses(self, category_id: uuid.UUID) -> bool:
        return (
            self.db.query(Course.id).filter(Course.category_id == category_id).first()
            is not None
        )
