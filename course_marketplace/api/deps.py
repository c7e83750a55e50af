"""
Shared FastAPI dependencies: the authenticated caller and
the enrollment service wired with its checkout processor.
"""

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from course_marketplace.config import get_settings
from course_marketplace.models.base import get_db
from course_marketplace.security import TokenError, decode_access_token
from course_marketplace.services.authorization import Actor
from course_marketplace.services.checkout_processor import (
    CheckoutProcessor,
    build_checkout_processor,
)
from course_marketplace.services.enrollment_service import EnrollmentService

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Actor:
    """Resolve the bearer token into the calling user, or answer 401."""
    if credentials is None:
        raise HTTPException(
            status_code=401,
            detail="Not authorized to access this route",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return decode_access_token(credentials.credentials)
    except TokenError as e:
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_checkout_processor() -> CheckoutProcessor:
    return build_checkout_processor(get_settings())


def get_enrollment_service(
    db: Session = Depends(get_db),
    processor: CheckoutProcessor = Depends(get_checkout_processor),
) -> EnrollmentService:
    return EnrollmentService(db, processor)
