"""
Payment channels.

Each PaymentMethod has exactly one channel class. A channel
turns a purchase attempt into the initial payment state of the
enrollment; it never touches the database. Channels differ in
when confirmation arrives:

- free: no payment step, the enrollment completes immediately
- stripe: the user pays on a hosted Checkout page, the session
  is confirmed later
- manual_transfer: the user sends money offline and an
  administrator verifies the reference they typed in
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass

from course_marketplace.config import Settings
from course_marketplace.exceptions import ValidationError
from course_marketplace.models.course import Course
from course_marketplace.models.enums import PaymentMethod, PaymentStatus
from course_marketplace.services.checkout_processor import CheckoutProcessor


@dataclass
class ChannelResult:
    status: PaymentStatus
    transaction_reference: str
    redirect_url: str | None = None
    session_id: str | None = None


class PaymentChannel(ABC):
    method: PaymentMethod

    @abstractmethod
    def initiate(
        self,
        course: Course,
        user_id: int,
        amount: int,
        reference: str | None = None,
    ) -> ChannelResult:
        """
        Start payment of `amount` (minor units) for `course`.

        `amount` is the enrollment's price snapshot, which may
        differ from the course's current catalog price.
        """


class FreeChannel(PaymentChannel):
    method = PaymentMethod.FREE

    def initiate(self, course, user_id, amount, reference=None):
        if amount != 0:
            raise ValidationError(
                f"Course {course.id} is not free; choose a payment method"
            )
        return ChannelResult(
            status=PaymentStatus.COMPLETED,
            transaction_reference=f"free_{uuid.uuid4().hex}",
        )


class StripeChannel(PaymentChannel):
    method = PaymentMethod.STRIPE

    def __init__(self, processor: CheckoutProcessor, frontend_url: str, currency: str):
        self.processor = processor
        self.frontend_url = frontend_url.rstrip("/")
        self.currency = currency

    def initiate(self, course, user_id, amount, reference=None):
        if amount <= 0:
            raise ValidationError(
                f"Course {course.id} has no price to charge; use the free method"
            )
        # {CHECKOUT_SESSION_ID} is substituted by Stripe on redirect
        success_url = (
            f"{self.frontend_url}/payment/success"
            f"?session_id={{CHECKOUT_SESSION_ID}}&course_id={course.id}"
        )
        cancel_url = f"{self.frontend_url}/payment/cancel?course_id={course.id}"

        session = self.processor.create_session(
            title=course.title,
            description=course.description,
            amount=amount,
            currency=self.currency,
            success_url=success_url,
            cancel_url=cancel_url,
            metadata={"course_id": str(course.id), "user_id": str(user_id)},
        )
        return ChannelResult(
            status=PaymentStatus.PENDING,
            transaction_reference=session.id,
            redirect_url=session.url,
            session_id=session.id,
        )


class ManualTransferChannel(PaymentChannel):
    method = PaymentMethod.MANUAL_TRANSFER

    def __init__(self, destination_account: str):
        self.destination_account = destination_account

    def initiate(self, course, user_id, amount, reference=None):
        if reference is None or not reference.strip():
            raise ValidationError(
                "Transaction ID is required for manual transfer. "
                f"Send {amount} to account {self.destination_account}, "
                "then submit the transfer's transaction ID.",
                payToAccount=self.destination_account,
                amount=amount,
            )
        return ChannelResult(
            status=PaymentStatus.PENDING,
            transaction_reference=reference,
        )


def build_channels(
    processor: CheckoutProcessor, settings: Settings
) -> dict[PaymentMethod, PaymentChannel]:
    channels = [
        FreeChannel(),
        StripeChannel(processor, settings.FRONTEND_URL, settings.STRIPE_CURRENCY),
        ManualTransferChannel(settings.MANUAL_TRANSFER_ACCOUNT),
    ]
    return {channel.method: channel for channel in channels}
