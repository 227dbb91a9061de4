from uuid import UUID
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CategoryCreate(BaseModel):
    # validated against the allowed list in the service, so a bad name is a 400
    name: Optional[str] = None


class CategoryRead(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)
