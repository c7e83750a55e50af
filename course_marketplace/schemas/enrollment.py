"""
Pydantic schemas for enrollment operations.

The HTTP contract uses camelCase field names; the alias
generator maps them onto snake_case attributes. Payment method
and verification status arrive as plain strings so that unknown
values are rejected by the service with a 400, the same as every
other validation failure in the purchase flow.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from course_marketplace.models.enums import PaymentMethod, PaymentStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# --- Request Schemas ---

class PurchaseRequest(CamelModel):
    payment_method: str = Field(min_length=1, max_length=50)
    # Manual transfer reference typed in by the user
    transaction_id: str | None = Field(default=None, max_length=255)


class VerifyRequest(CamelModel):
    status: str = Field(min_length=1, max_length=20)


class CheckoutConfirmRequest(CamelModel):
    session_id: str = Field(min_length=1, max_length=255)


# --- Response Schemas ---

class EnrollmentResponse(CamelModel):
    id: int
    external_id: uuid.UUID
    user_id: int
    course_id: int
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    transaction_reference: str | None
    amount: int
    currency: str
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime


class RedirectPurchaseResponse(CamelModel):
    """Returned when the client must finish payment on the processor page."""
    redirect_url: str
    session_id: str
    enrollment: EnrollmentResponse


class EnrollmentListResponse(CamelModel):
    count: int
    data: list[EnrollmentResponse]
