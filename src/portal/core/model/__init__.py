"""Portal domain models.

Pydantic v2 models shared by the API, the cache and the repositories.
Field names are snake_case in Python and camelCase on the wire.
"""

from pydantic import BaseModel


class StrictModel(BaseModel):
    """Base model for all portal domain models.

    Unknown fields are rejected; both the Python name and the camelCase
    alias are accepted on input. ``from_attributes`` lets repositories
    validate ORM rows directly.
    """

    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "from_attributes": True,
    }


# Import order matters: StrictModel must be defined first
# ruff: noqa: E402
from portal.core.model.courses import Course, CourseRegistration, StudentProgress
from portal.core.model.payments import PaymentMethod
from portal.core.model.people import Staff, Student

__all__ = [
    "StrictModel",
    "Student",
    "Staff",
    "Course",
    "CourseRegistration",
    "StudentProgress",
    "PaymentMethod",
]
