"""
Hosted checkout processor clients.

The enrollment service receives a CheckoutProcessor at
construction instead of reaching for a module-level Stripe
client. Without a secret key the processor is the unavailable
variant, which fails every call with ChannelUnavailableError.

Stripe is called with a per-request api_key; nothing here sets
stripe.api_key globally. There is no retry: if Stripe times out
the caller's purchase fails and nothing is written.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import stripe

from course_marketplace.config import Settings
from course_marketplace.exceptions import (
    ChannelUnavailableError,
    PaymentProcessorError,
)

logger = logging.getLogger(__name__)


@dataclass
class CheckoutSession:
    id: str
    url: str | None
    # Stripe session status: open, complete or expired
    status: str | None = None
    # Stripe payment status: paid, unpaid or no_payment_required
    payment_status: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"

    @property
    def is_expired(self) -> bool:
        return self.status == "expired"


class CheckoutProcessor(ABC):

    @abstractmethod
    def create_session(
        self,
        *,
        title: str,
        description: str,
        amount: int,
        currency: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> CheckoutSession:
        """Create a hosted checkout session for a single item."""

    @abstractmethod
    def retrieve_session(self, session_id: str) -> CheckoutSession:
        """Fetch the current state of a checkout session."""


class UnavailableCheckoutProcessor(CheckoutProcessor):
    """Used when no processor credentials are configured."""

    message = "Online card payments are not available right now"

    def create_session(self, **kwargs) -> CheckoutSession:
        raise ChannelUnavailableError(self.message)

    def retrieve_session(self, session_id: str) -> CheckoutSession:
        raise ChannelUnavailableError(self.message)


class StripeCheckoutProcessor(CheckoutProcessor):

    def __init__(self, api_key: str):
        self.api_key = api_key

    def create_session(
        self,
        *,
        title: str,
        description: str,
        amount: int,
        currency: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> CheckoutSession:
        product_data = {"name": title}
        # Stripe rejects an empty description
        if description:
            product_data["description"] = description

        params = dict(
            mode="payment",
            payment_method_types=["card"],
            line_items=[{
                "price_data": {
                    "currency": currency,
                    "product_data": product_data,
                    "unit_amount": amount,
                },
                "quantity": 1,
            }],
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata,
        )

        try:
            session = stripe.checkout.Session.create(api_key=self.api_key, **params)
        except stripe.StripeError as e:
            logger.error("Stripe checkout session creation failed: %s", e)
            raise PaymentProcessorError(
                "Stripe Checkout session could not be created",
                processor_error=getattr(e, "user_message", None) or str(e),
            )
        return self._to_checkout_session(session)

    def retrieve_session(self, session_id: str) -> CheckoutSession:
        try:
            session = stripe.checkout.Session.retrieve(
                session_id, api_key=self.api_key
            )
        except stripe.InvalidRequestError:
            raise PaymentProcessorError(
                f"Checkout session {session_id} is unknown to Stripe"
            )
        except stripe.StripeError as e:
            logger.error("Stripe checkout session %s lookup failed: %s", session_id, e)
            raise PaymentProcessorError(
                "Stripe Checkout session could not be retrieved",
                processor_error=getattr(e, "user_message", None) or str(e),
            )
        return self._to_checkout_session(session)

    @staticmethod
    def _to_checkout_session(session) -> CheckoutSession:
        metadata = getattr(session, "metadata", None) or {}
        return CheckoutSession(
            id=session.id,
            url=getattr(session, "url", None),
            status=getattr(session, "status", None),
            payment_status=getattr(session, "payment_status", None),
            metadata={k: str(v) for k, v in metadata.items()},
        )


def build_checkout_processor(settings: Settings) -> CheckoutProcessor:
    if settings.STRIPE_SECRET_KEY:
        return StripeCheckoutProcessor(settings.STRIPE_SECRET_KEY)
    return UnavailableCheckoutProcessor()
