"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from course_marketplace.models.base import Base
from course_marketplace.models.enums import (
    PaymentMethod,
    PaymentStatus,
    UserRole,
)
from course_marketplace.models.course import Course
from course_marketplace.models.enrollment import Enrollment

__all__ = [
    "Base",
    "PaymentMethod",
    "PaymentStatus",
    "UserRole",
    "Course",
    "Enrollment",
]
