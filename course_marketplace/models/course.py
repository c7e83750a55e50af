"""
Course model.

The catalog is owned by the course management side of the
platform. The enrollment core only reads it: to check that a
course exists and to snapshot its price.
"""

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from course_marketplace.models.base import Base


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    instructor: Mapped[str] = mapped_column(
        String(100), nullable=False, default=""
    )
    # Price in the smallest currency unit (cents)
    price_minor_units: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    enrollments: Mapped[list["Enrollment"]] = relationship(
        back_populates="course"
    )

    @property
    def is_free(self) -> bool:
        return self.price_minor_units == 0

    def __repr__(self) -> str:
        return f"<Course {self.id} {self.title!r} ({self.price_minor_units})>"
