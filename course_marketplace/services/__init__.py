"""Business logic services."""

from course_marketplace.services.catalog_service import CourseCatalog
from course_marketplace.services.enrollment_ledger import EnrollmentLedger
from course_marketplace.services.enrollment_service import EnrollmentService

__all__ = ["CourseCatalog", "EnrollmentLedger", "EnrollmentService"]
