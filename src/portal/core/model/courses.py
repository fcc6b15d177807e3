"""Courses, registrations and per-student progress."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from pydantic import Field

from portal.core.model import StrictModel


class Course(StrictModel):
    course_id: str = Field(alias="courseId", min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    fee: float = Field(default=0.0, ge=0)
    duration_weeks: int | None = Field(default=None, alias="durationWeeks", ge=1)


class CourseRegistration(StrictModel):
    """A student's registration for a course.

    The id is generated on insert; clients must not send one when creating.
    """

    id: UUID | None = None
    student_id: str = Field(alias="studentId")
    course_id: str = Field(alias="courseId")
    status: str = Field(default="pending", max_length=50)
    register_date: date = Field(alias="registerDate")
    appointment_date: date | None = Field(default=None, alias="appointmentDate")
    fee: float = Field(ge=0)
    discount_amount: float = Field(default=0.0, alias="discountAmount", ge=0)
    payment_method_id: int | None = Field(default=None, alias="paymentMethodId")


class StudentProgress(StrictModel):
    """Progress of one student through one course."""

    id: UUID | None = None
    student_id: str = Field(alias="studentId")
    course_id: str = Field(alias="courseId")
    lessons_completed: int = Field(default=0, alias="lessonsCompleted", ge=0)
    status: str = Field(default="in_progress", max_length=50)
    note: str | None = None
