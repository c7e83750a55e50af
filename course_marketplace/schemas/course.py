"""
Pydantic schemas for catalog data exposed by the enrollment API.
"""

from course_marketplace.schemas.enrollment import CamelModel


class CourseResponse(CamelModel):
    id: int
    title: str
    description: str
    instructor: str
    price_minor_units: int


class CourseListResponse(CamelModel):
    count: int
    data: list[CourseResponse]
