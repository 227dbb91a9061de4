from __future__ import annotations

import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coursemarket.db.base import Base
from coursemarket.db.mixins import TimestampMixin

if TYPE_CHECKING:
    from coursemarket.modules.auth.models import User
    from coursemarket.modules.courses.models import Course


class PaymentStatus(str, enum.Enum):
    pending = "pending"
    success = "success"


class Purchase(TimestampMixin, Base):
    """A user's purchase of a course, keyed by the gateway transaction reference."""

    __tablename__ = "purchases"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # kept when the course is deleted; purchases are financial records
    course_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("courses.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name="payment_status"),
        default=PaymentStatus.pending,
        server_default=PaymentStatus.pending.value,
        nullable=False,
    )

    reference: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )

    # minor currency units as sent to the gateway
    amount: Mapped[int] = mapped_column(Integer, nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="purchases")
    course: Mapped["Course | None"] = relationship("Course")
