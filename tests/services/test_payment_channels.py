"""
Tests for the payment channels.
"""

import pytest

from course_marketplace.config import get_settings
from course_marketplace.exceptions import ChannelUnavailableError, ValidationError
from course_marketplace.models.enums import PaymentMethod, PaymentStatus
from course_marketplace.services.checkout_processor import (
    UnavailableCheckoutProcessor,
)
from course_marketplace.services.payment_channels import (
    FreeChannel,
    ManualTransferChannel,
    StripeChannel,
    build_channels,
)


class TestFreeChannel:

    def test_free_course_completes_immediately(self, make_course):
        course = make_course(price=0)
        result = FreeChannel().initiate(course, user_id=1, amount=0)

        assert result.status == PaymentStatus.COMPLETED
        assert result.transaction_reference.startswith("free_")
        assert result.redirect_url is None

    def test_paid_course_rejected(self, make_course):
        course = make_course(price=1000)
        with pytest.raises(ValidationError, match="not free"):
            FreeChannel().initiate(course, user_id=1, amount=1000)


class TestStripeChannel:

    def _channel(self, processor):
        return StripeChannel(processor, "https://learn.example.com/", "usd")

    def test_creates_single_item_session(self, processor, make_course):
        course = make_course(title="Data Science", price=4999, description="Pandas")
        result = self._channel(processor).initiate(course, user_id=7, amount=4999)

        assert len(processor.created) == 1
        params = processor.created[0]
        assert params["title"] == "Data Science"
        assert params["description"] == "Pandas"
        assert params["amount"] == 4999
        assert params["currency"] == "usd"
        assert params["metadata"] == {"course_id": str(course.id), "user_id": "7"}

        assert result.status == PaymentStatus.PENDING
        assert result.transaction_reference == result.session_id == "cs_test_1"
        assert result.redirect_url.endswith("/cs_test_1")

    def test_callback_urls_carry_session_placeholder(self, processor, make_course):
        course = make_course()
        self._channel(processor).initiate(course, user_id=1, amount=1000)

        params = processor.created[0]
        assert params["success_url"] == (
            "https://learn.example.com/payment/success"
            f"?session_id={{CHECKOUT_SESSION_ID}}&course_id={course.id}"
        )
        assert params["cancel_url"] == (
            f"https://learn.example.com/payment/cancel?course_id={course.id}"
        )

    def test_unconfigured_processor_is_unavailable(self, make_course):
        course = make_course()
        channel = self._channel(UnavailableCheckoutProcessor())

        with pytest.raises(ChannelUnavailableError):
            channel.initiate(course, user_id=1, amount=1000)

    def test_zero_amount_rejected(self, processor, make_course):
        course = make_course(price=0)
        with pytest.raises(ValidationError, match="free method"):
            self._channel(processor).initiate(course, user_id=1, amount=0)
        assert processor.created == []


class TestManualTransferChannel:

    def test_missing_reference_explains_where_to_pay(self, make_course):
        course = make_course()
        channel = ManualTransferChannel("01012345678")

        with pytest.raises(ValidationError, match="01012345678") as exc_info:
            channel.initiate(course, user_id=1, amount=1000)

        assert exc_info.value.extra["payToAccount"] == "01012345678"
        assert exc_info.value.extra["amount"] == 1000

    def test_blank_reference_rejected(self, make_course):
        course = make_course()
        with pytest.raises(ValidationError, match="required"):
            ManualTransferChannel("01012345678").initiate(
                course, user_id=1, amount=1000, reference="   "
            )

    def test_reference_stored_verbatim(self, make_course):
        course = make_course()
        result = ManualTransferChannel("01012345678").initiate(
            course, user_id=1, amount=1000, reference=" TX123 "
        )

        assert result.status == PaymentStatus.PENDING
        assert result.transaction_reference == " TX123 "
        assert result.redirect_url is None


def test_every_payment_method_has_a_channel(processor):
    channels = build_channels(processor, get_settings())

    assert set(channels) == set(PaymentMethod)
    for method, channel in channels.items():
        assert channel.method == method
