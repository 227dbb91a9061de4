from __future__ import annotations

import uuid
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursemarket.core.logging import get_logger
from coursemarket.core.responses import server_error
from coursemarket.modules.categories.models import ALLOWED_CATEGORIES, Category
from coursemarket.modules.categories.repository import CategoryRepository

logger = get_logger(__name__)


class CategoryService:
    """Categories come from a closed list; admins create and delete them."""

    def __init__(self, db: Session):
        self.db = db
        self.category_repo = CategoryRepository(db)

    def create_category(self, name: Optional[str]) -> Category:
        if not name:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Name is required",
            )

        # exact, case-sensitive match against the allowed list
        if name not in ALLOWED_CATEGORIES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid category name",
            )

        if self.category_repo.get_by_name(name):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Category already exists",
            )

        try:
            category = self.category_repo.create(name)
            self.db.commit()
            self.db.refresh(category)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise server_error("Error creating category", e)

        logger.info("created category", category_id=str(category.id), name=name)
        return category

    def list_categories(self) -> list[Category]:
        return self.category_repo.list_all()

    def delete_category(self, category_id: uuid.UUID) -> None:
        category = self.category_repo.get_by_id(category_id)
        if not category:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Category not found",
            )

        if self.category_repo.has_courses(category_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Category is still used by courses",
            )

        self.category_repo.delete(category)
        self.db.commit()
        logger.info("deleted category", category_id=str(category_id))
