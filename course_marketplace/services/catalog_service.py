"""
Read-only access to the course catalog.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from course_marketplace.exceptions import NotFoundError
from course_marketplace.models.course import Course


class CourseCatalog:

    def __init__(self, db: Session):
        self.db = db

    def get_course(self, course_id: int) -> Course:
        """Get a course by ID."""
        course = self.db.get(Course, course_id)
        if not course:
            raise NotFoundError(f"Course {course_id} not found")
        return course

    def get_courses(self, course_ids: list[int]) -> list[Course]:
        """
        Load several courses at once, in the order of course_ids.

        IDs with no matching course are skipped.
        """
        if not course_ids:
            return []
        courses = self.db.execute(
            select(Course).where(Course.id.in_(course_ids))
        ).scalars().all()
        by_id = {c.id: c for c in courses}
        return [by_id[cid] for cid in course_ids if cid in by_id]
