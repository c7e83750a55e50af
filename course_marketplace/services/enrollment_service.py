"""
Enrollment service: purchase, verification and confirmation.

This is the only component that changes enrollments. It:
1. Looks up the course in the catalog
2. Rejects users who already completed an enrollment
3. Dispatches to the payment channel for the requested method
4. Creates the enrollment, or reuses the pending/failed row
   for the same user and course
5. Moves enrollments out of PENDING when payment is verified
   by an administrator or confirmed by the checkout processor

The caller controls the commit.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from course_marketplace.config import Settings, get_settings
from course_marketplace.exceptions import (
    AlreadyEnrolledError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from course_marketplace.models.course import Course
from course_marketplace.models.enrollment import Enrollment
from course_marketplace.models.enums import (
    PaymentMethod,
    PaymentStatus,
    UserRole,
)
from course_marketplace.services.authorization import (
    Actor,
    authorize,
    authorize_owner,
)
from course_marketplace.services.catalog_service import CourseCatalog
from course_marketplace.services.checkout_processor import (
    CheckoutProcessor,
    build_checkout_processor,
)
from course_marketplace.services.enrollment_ledger import EnrollmentLedger
from course_marketplace.services.payment_channels import (
    ChannelResult,
    PaymentChannel,
    build_channels,
)

logger = logging.getLogger(__name__)

# Outcomes an administrator may record
VERIFY_OUTCOMES = {PaymentStatus.COMPLETED, PaymentStatus.FAILED}


@dataclass
class PurchaseResult:
    enrollment: Enrollment
    redirect_url: str | None = None
    session_id: str | None = None

    @property
    def requires_redirect(self) -> bool:
        return self.redirect_url is not None


class EnrollmentService:

    def __init__(
        self,
        db: Session,
        processor: CheckoutProcessor | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self.db = db
        self.ledger = EnrollmentLedger(db)
        self.catalog = CourseCatalog(db)
        self.processor = processor or build_checkout_processor(settings)
        self.currency = settings.STRIPE_CURRENCY
        self.channels = build_channels(self.processor, settings)

        missing = set(PaymentMethod) - set(self.channels)
        if missing:
            raise RuntimeError(
                f"No payment channel for: {sorted(m.value for m in missing)}"
            )

    def _channel_for(self, payment_method: str) -> PaymentChannel:
        try:
            method = PaymentMethod(payment_method)
        except ValueError:
            allowed = ", ".join(m.value for m in PaymentMethod)
            raise ValidationError(
                f"Unsupported payment method '{payment_method}'. "
                f"Use one of: {allowed}"
            )
        return self.channels[method]

    def purchase(
        self,
        actor: Actor,
        course_id: int,
        payment_method: str,
        reference: str | None = None,
    ) -> PurchaseResult:
        """
        Start (or restart) an enrollment for the actor.

        A new enrollment snapshots the course's current price. A
        pending or failed enrollment for the same course is reused
        and keeps the amount it was created with.
        """
        course = self.catalog.get_course(course_id)

        existing = self.ledger.find_by_user_and_course(actor.user_id, course.id)
        if existing and existing.is_completed:
            raise AlreadyEnrolledError("Already enrolled in this course")

        channel = self._channel_for(payment_method)
        amount = existing.amount if existing else course.price_minor_units
        result = channel.initiate(course, actor.user_id, amount, reference)

        if existing:
            enrollment = self._reopen(existing, channel.method, result)
        else:
            enrollment = self._create(actor, course, channel.method, result)

        logger.info(
            "User %s purchase of course %s via %s: %s",
            actor.user_id, course.id, channel.method.value,
            enrollment.payment_status.value,
        )
        return PurchaseResult(
            enrollment=enrollment,
            redirect_url=result.redirect_url,
            session_id=result.session_id,
        )

    def _create(
        self,
        actor: Actor,
        course: Course,
        method: PaymentMethod,
        result: ChannelResult,
    ) -> Enrollment:
        enrollment = Enrollment(
            user_id=actor.user_id,
            course_id=course.id,
            payment_method=method,
            payment_status=PaymentStatus.PENDING,
            transaction_reference=result.transaction_reference,
            amount=course.price_minor_units,
            currency=self.currency,
        )
        enrollment = self.ledger.create(enrollment)
        if result.status != PaymentStatus.PENDING:
            enrollment = self.ledger.update_status(enrollment.id, result.status)
        return enrollment

    def _reopen(
        self,
        enrollment: Enrollment,
        method: PaymentMethod,
        result: ChannelResult,
    ) -> Enrollment:
        """Point an unfinished enrollment at a new payment attempt."""
        if enrollment.payment_status == PaymentStatus.FAILED:
            logger.info("Reopening failed enrollment %s", enrollment.id)
        return self.ledger.reopen(
            enrollment.id, method, result.transaction_reference, result.status
        )

    def verify(
        self, enrollment_id: int, outcome: str, actor: Actor
    ) -> Enrollment:
        """
        Record an administrator's decision on a pending payment.

        Repeating the decision already recorded is a no-op. Any
        other change to a completed or failed enrollment is
        rejected.
        """
        authorize(actor, UserRole.ADMIN)
        enrollment = self.ledger.get(enrollment_id)

        try:
            new_status = PaymentStatus(outcome)
        except ValueError:
            new_status = None
        if new_status not in VERIFY_OUTCOMES:
            raise ValidationError(
                f"Invalid status '{outcome}'. Use 'completed' or 'failed'"
            )

        if enrollment.payment_status == new_status:
            return enrollment

        if not enrollment.can_transition_to(new_status):
            raise InvalidTransitionError(
                f"Cannot change enrollment {enrollment.id} from "
                f"{enrollment.payment_status.value} to {new_status.value}"
            )

        if new_status == PaymentStatus.COMPLETED and not enrollment.transaction_reference:
            raise ValidationError(
                f"Enrollment {enrollment.id} has no transaction reference to verify"
            )

        enrollment = self.ledger.update_status(enrollment.id, new_status)
        logger.info(
            "Admin %s marked enrollment %s %s",
            actor.user_id, enrollment.id, new_status.value,
        )
        return enrollment

    def confirm_checkout(self, actor: Actor, session_id: str) -> Enrollment:
        """
        Reconcile a Stripe enrollment with its Checkout session.

        Called when the user returns from the hosted payment page.
        The session state is read from Stripe, never trusted from
        the client: paid completes the enrollment, expired fails
        it, anything else leaves it pending.
        """
        enrollment = self.ledger.find_by_transaction_reference(session_id)
        if not enrollment or enrollment.payment_method != PaymentMethod.STRIPE:
            raise NotFoundError(f"No card payment found for session {session_id}")
        authorize_owner(actor, enrollment.user_id)

        if enrollment.payment_status != PaymentStatus.PENDING:
            return enrollment

        session = self.processor.retrieve_session(session_id)
        if session.is_paid:
            new_status = PaymentStatus.COMPLETED
        elif session.is_expired:
            new_status = PaymentStatus.FAILED
        else:
            return enrollment

        enrollment = self.ledger.update_status(enrollment.id, new_status)
        logger.info(
            "Checkout session %s confirmed enrollment %s as %s",
            session_id, enrollment.id, new_status.value,
        )
        return enrollment

    def list_mine(self, actor: Actor) -> list[Course]:
        """Courses the actor has a completed enrollment for."""
        enrollments = self.ledger.list_completed_by_user(actor.user_id)
        return self.catalog.get_courses([e.course_id for e in enrollments])

    def get_enrollment(self, actor: Actor, enrollment_id: int) -> Enrollment:
        enrollment = self.ledger.get(enrollment_id)
        authorize_owner(actor, enrollment.user_id)
        return enrollment

    def list_pending(self, actor: Actor) -> list[Enrollment]:
        """Enrollments waiting for a payment decision, oldest first."""
        authorize(actor, UserRole.ADMIN)
        return self.ledger.list_by_status(PaymentStatus.PENDING)
