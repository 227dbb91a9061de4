from uuid import UUID
from typing import Optional
from datetime import datetime

from pydantic import BaseModel, EmailStr, ConfigDict, Field

from coursemarket.modules.auth.models import UserRole


class UserBase(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr


class UserCreate(UserBase):
    password: str = Field(min_length=1)
    role: UserRole = UserRole.student


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)


class RoleUpdate(BaseModel):
    role: UserRole


class SuspensionUpdate(BaseModel):
    suspended: bool


class UserRead(UserBase):
    id: UUID
    role: UserRole
    suspended: bool
    deleted: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
