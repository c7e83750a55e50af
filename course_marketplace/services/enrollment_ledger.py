"""
Enrollment ledger: the authoritative store of enrollments.

The ledger only reads and writes rows. Deciding whether a write
is allowed belongs to the EnrollmentService, which is the only
caller. Every write is flushed immediately so that constraint
violations surface inside the call that caused them; the API
layer owns the commit.
"""

import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from course_marketplace.exceptions import (
    AlreadyEnrolledError,
    ConflictError,
    NotFoundError,
)
from course_marketplace.models.enrollment import Enrollment
from course_marketplace.models.enums import PaymentMethod, PaymentStatus

logger = logging.getLogger(__name__)


class EnrollmentLedger:

    def __init__(self, db: Session):
        self.db = db

    def find_by_user_and_course(
        self, user_id: int, course_id: int
    ) -> Enrollment | None:
        return self.db.execute(
            select(Enrollment).where(
                Enrollment.user_id == user_id,
                Enrollment.course_id == course_id,
            )
        ).scalar_one_or_none()

    def find_by_transaction_reference(self, reference: str) -> Enrollment | None:
        return self.db.execute(
            select(Enrollment).where(
                Enrollment.transaction_reference == reference
            ).limit(1)
        ).scalar_one_or_none()

    def get(self, enrollment_id: int) -> Enrollment:
        enrollment = self.db.get(Enrollment, enrollment_id)
        if not enrollment:
            raise NotFoundError(f"Enrollment {enrollment_id} not found")
        return enrollment

    def create(self, enrollment: Enrollment) -> Enrollment:
        """
        Insert a new enrollment.

        The (user_id, course_id) unique constraint decides between
        concurrent purchases. The losing writer gets ConflictError;
        the caller must roll back its session before using it again.
        """
        user_id, course_id = enrollment.user_id, enrollment.course_id
        self.db.add(enrollment)
        try:
            self.db.flush()
        except IntegrityError:
            logger.warning(
                "Lost enrollment race for user %s course %s", user_id, course_id
            )
            raise ConflictError(
                "Enrollment for this course is already being processed. "
                "Check your enrollments before trying again."
            )
        return enrollment

    def update_status(
        self, enrollment_id: int, new_status: PaymentStatus
    ) -> Enrollment:
        enrollment = self.get(enrollment_id)
        enrollment.payment_status = new_status
        if new_status == PaymentStatus.COMPLETED:
            enrollment.completed_at = datetime.utcnow()
        self.db.flush()
        return enrollment

    def reopen(
        self,
        enrollment_id: int,
        method: PaymentMethod,
        reference: str,
        new_status: PaymentStatus,
    ) -> Enrollment:
        """
        Point an unfinished enrollment at a new payment attempt.

        The write is conditional on the row still not being
        completed in the database, so a verification committed by
        another request while the payment was being set up is never
        overwritten. Raises AlreadyEnrolledError in that case.
        """
        values = {
            "payment_method": method,
            "transaction_reference": reference,
            "payment_status": new_status,
        }
        if new_status == PaymentStatus.COMPLETED:
            values["completed_at"] = datetime.utcnow()

        result = self.db.execute(
            update(Enrollment)
            .where(
                Enrollment.id == enrollment_id,
                Enrollment.payment_status != PaymentStatus.COMPLETED,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        enrollment = self.get(enrollment_id)
        self.db.refresh(enrollment)

        if result.rowcount == 0:
            logger.warning(
                "Enrollment %s was completed while a new payment was being set up",
                enrollment_id,
            )
            raise AlreadyEnrolledError("Already enrolled in this course")
        return enrollment

    def list_completed_by_user(self, user_id: int) -> list[Enrollment]:
        """Completed enrollments for a user, newest first."""
        enrollments = self.db.execute(
            select(Enrollment)
            .where(
                Enrollment.user_id == user_id,
                Enrollment.payment_status == PaymentStatus.COMPLETED,
            )
            .order_by(Enrollment.created_at.desc(), Enrollment.id.desc())
        ).scalars().all()
        return list(enrollments)

    def list_by_status(self, status: PaymentStatus) -> list[Enrollment]:
        """Enrollments in a given status, oldest first."""
        enrollments = self.db.execute(
            select(Enrollment)
            .where(Enrollment.payment_status == status)
            .order_by(Enrollment.created_at, Enrollment.id)
        ).scalars().all()
        return list(enrollments)
