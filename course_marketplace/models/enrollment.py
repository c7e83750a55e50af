"""
Enrollment model.

One row links one user to one course and carries the payment
state for that pair. The (user_id, course_id) unique constraint
is what keeps two concurrent purchases from both succeeding:
a retry reuses the existing row instead of adding a second one.

Enrollments are never deleted; failed and completed rows stay
for audit.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    String, Integer, DateTime, ForeignKey, UniqueConstraint,
    Enum as SAEnum, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from course_marketplace.models.base import Base
from course_marketplace.models.enums import PaymentMethod, PaymentStatus


# Valid payment status transitions. FAILED -> PENDING only
# happens when the user starts a new purchase attempt.
VALID_TRANSITIONS: dict[PaymentStatus, set[PaymentStatus]] = {
    PaymentStatus.PENDING: {PaymentStatus.COMPLETED, PaymentStatus.FAILED},
    PaymentStatus.FAILED: {PaymentStatus.PENDING},
    PaymentStatus.COMPLETED: set(),  # Terminal state
}


class Enrollment(Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "course_id", name="uq_enrollments_user_course"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    external_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, unique=True, nullable=False, default=uuid.uuid4
    )
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id"), nullable=False, index=True
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(
            PaymentMethod,
            name="payment_method_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(
            PaymentStatus,
            name="payment_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    transaction_reference: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    # Snapshot of the course price in minor units, never recomputed
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="usd"
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    course: Mapped["Course"] = relationship(back_populates="enrollments")

    @property
    def is_completed(self) -> bool:
        return self.payment_status == PaymentStatus.COMPLETED

    def can_transition_to(self, new_status: PaymentStatus) -> bool:
        """Check if a payment status transition is valid."""
        return new_status in VALID_TRANSITIONS.get(self.payment_status, set())

    def __repr__(self) -> str:
        return (
            f"<Enrollment user={self.user_id} course={self.course_id} "
            f"{self.payment_method.value} ({self.payment_status.value})>"
        )
