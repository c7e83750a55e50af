"""
Shared enumerations for database models.

Python enums mapped to database enums mean an invalid
payment method or status is rejected by the database,
not just by Python validation.
"""

import enum


class PaymentMethod(str, enum.Enum):
    """How payment for an enrollment is asserted."""
    STRIPE = "stripe"
    MANUAL_TRANSFER = "manual_transfer"
    FREE = "free"


class PaymentStatus(str, enum.Enum):
    """Payment state of an enrollment."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class UserRole(str, enum.Enum):
    """Roles issued by the identity provider."""
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"
