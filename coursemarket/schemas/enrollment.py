from uuid import UUID
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from coursemarket.modules.enrollments.models import EnrollmentStatus


class EnrollmentRead(BaseModel):
    id: UUID
    user_id: UUID
    course_id: UUID
    status: EnrollmentStatus
    enrolled_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
