"""API routers for the portal."""

from portal.api.routers import (
    cache,
    course_registrations,
    courses,
    health,
    payment_methods,
    staff,
    student_progress,
    students,
)

__all__ = [
    "cache",
    "course_registrations",
    "courses",
    "health",
    "payment_methods",
    "staff",
    "student_progress",
    "students",
]
