"""
Domain errors raised by the enrollment services.

Every error is an expected, recoverable condition. Each carries
the HTTP status the API layer answers with, and optionally extra
fields merged into the response body.
"""


class EnrollmentError(ValueError):
    status_code = 400

    def __init__(self, message: str, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra


class ValidationError(EnrollmentError):
    """Malformed or missing input."""
    status_code = 400


class NotFoundError(EnrollmentError):
    status_code = 404


class AlreadyEnrolledError(EnrollmentError):
    """The user already holds a completed enrollment for the course."""
    status_code = 400


class ConflictError(AlreadyEnrolledError):
    """
    A concurrent purchase for the same user and course won the
    race at the database uniqueness constraint.

    Subclasses AlreadyEnrolledError so callers treating it as
    "already enrolled" keep working, but answers 409 so clients
    can tell it apart and re-read their enrollments.
    """
    status_code = 409


class InvalidTransitionError(EnrollmentError):
    status_code = 409


class ForbiddenError(EnrollmentError):
    status_code = 403


class PaymentProcessorError(EnrollmentError):
    """The payment processor rejected or failed the request."""
    status_code = 502


class ChannelUnavailableError(EnrollmentError):
    """The requested payment channel is not configured."""
    status_code = 503
