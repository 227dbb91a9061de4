# coursemarket/modules/categories/routes.py
from uuid import UUID
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursemarket.core.responses import ApiResponse, MessageResponse
from coursemarket.db.deps import get_db, require_roles
from coursemarket.modules.auth.models import User, UserRole
from coursemarket.modules.categories.service import CategoryService
from coursemarket.schemas.category import CategoryCreate, CategoryRead

router = APIRouter(prefix="/category", tags=["categories"])


@router.post(
    "/create",
    response_model=ApiResponse[CategoryRead],
    status_code=status.HTTP_201_CREATED,
)
def create_category(
    payload: CategoryCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(UserRole.admin)),
):
    category = CategoryService(db).create_category(payload.name)
    return ApiResponse(
        code=status.HTTP_201_CREATED,
        message="Category created successfully",
        data=CategoryRead.model_validate(category),
    )


@router.get("", response_model=ApiResponse[List[CategoryRead]])
def list_categories(db: Session = Depends(get_db)):
    categories = CategoryService(db).list_categories()
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="Categories retrieved successfully",
        data=[CategoryRead.model_validate(c) for c in categories],
    )


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(UserRole.admin)),
):
    CategoryService(db).delete_category(category_id)
    return MessageResponse(code=status.HTTP_200_OK, message="Category deleted successfully")
