"""
Enrollment API endpoints.

The API layer is thin: it authenticates the caller, owns the
commit/rollback of the request's session, and shapes responses.
Domain errors propagate to the handler registered in main.py,
which turns them into status codes.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from course_marketplace.api.deps import get_current_actor, get_enrollment_service
from course_marketplace.exceptions import EnrollmentError
from course_marketplace.models.base import get_db
from course_marketplace.services.authorization import Actor
from course_marketplace.services.enrollment_service import EnrollmentService
from course_marketplace.schemas.course import CourseListResponse, CourseResponse
from course_marketplace.schemas.enrollment import (
    PurchaseRequest,
    VerifyRequest,
    CheckoutConfirmRequest,
    EnrollmentResponse,
    RedirectPurchaseResponse,
    EnrollmentListResponse,
)

router = APIRouter(prefix="/enrollments", tags=["Enrollments"])


@router.post(
    "/purchase/{course_id}",
    response_model=EnrollmentResponse | RedirectPurchaseResponse,
    status_code=201,
)
def purchase_course(
    course_id: int,
    request: PurchaseRequest,
    response: Response,
    actor: Actor = Depends(get_current_actor),
    service: EnrollmentService = Depends(get_enrollment_service),
    db: Session = Depends(get_db),
):
    """
    Purchase or enroll in a course.

    Free and manual transfer enrollments answer 201 with the
    enrollment. Card payments answer 200 with the Checkout URL
    the client must redirect to.
    """
    try:
        result = service.purchase(
            actor, course_id, request.payment_method, request.transaction_id
        )
        db.commit()
    except EnrollmentError:
        db.rollback()
        raise

    enrollment = EnrollmentResponse.model_validate(result.enrollment)
    if result.requires_redirect:
        response.status_code = 200
        return RedirectPurchaseResponse(
            redirect_url=result.redirect_url,
            session_id=result.session_id,
            enrollment=enrollment,
        )
    return enrollment


@router.get("/my-courses", response_model=CourseListResponse)
def get_my_courses(
    actor: Actor = Depends(get_current_actor),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    """Courses the caller has a completed enrollment for."""
    courses = service.list_mine(actor)
    return CourseListResponse(
        count=len(courses),
        data=[CourseResponse.model_validate(c) for c in courses],
    )


@router.get("/pending", response_model=EnrollmentListResponse)
def get_pending_enrollments(
    actor: Actor = Depends(get_current_actor),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    """Admin review queue of enrollments awaiting a payment decision."""
    enrollments = service.list_pending(actor)
    return EnrollmentListResponse(
        count=len(enrollments),
        data=[EnrollmentResponse.model_validate(e) for e in enrollments],
    )


@router.post("/checkout/confirm", response_model=EnrollmentResponse)
def confirm_checkout(
    request: CheckoutConfirmRequest,
    actor: Actor = Depends(get_current_actor),
    service: EnrollmentService = Depends(get_enrollment_service),
    db: Session = Depends(get_db),
):
    """Reconcile a card enrollment after the user returns from Checkout."""
    try:
        enrollment = service.confirm_checkout(actor, request.session_id)
        db.commit()
        return EnrollmentResponse.model_validate(enrollment)
    except EnrollmentError:
        db.rollback()
        raise


@router.put("/{enrollment_id}/verify", response_model=EnrollmentResponse)
def verify_payment(
    enrollment_id: int,
    request: VerifyRequest,
    actor: Actor = Depends(get_current_actor),
    service: EnrollmentService = Depends(get_enrollment_service),
    db: Session = Depends(get_db),
):
    """Mark a pending payment completed or failed. Admin only."""
    try:
        enrollment = service.verify(enrollment_id, request.status, actor)
        db.commit()
        return EnrollmentResponse.model_validate(enrollment)
    except EnrollmentError:
        db.rollback()
        raise


@router.get("/{enrollment_id}", response_model=EnrollmentResponse)
def get_enrollment(
    enrollment_id: int,
    actor: Actor = Depends(get_current_actor),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    """Get one enrollment. Visible to its owner and to admins."""
    return service.get_enrollment(actor, enrollment_id)
