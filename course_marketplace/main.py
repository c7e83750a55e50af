"""
Course Marketplace: FastAPI application.

This is the entry point for the application.
Logging, error handlers and routers are registered here.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from course_marketplace.config import get_settings
from course_marketplace.exceptions import EnrollmentError
from course_marketplace.api.health import router as health_router
from course_marketplace.api.enrollments import router as enrollments_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Course enrollment and payment service",
)


@app.exception_handler(EnrollmentError)
async def enrollment_error_handler(request: Request, exc: EnrollmentError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, **exc.extra},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    # Full detail goes to the log only
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Register routers
app.include_router(health_router)
app.include_router(enrollments_router)
