"""Students and staff members."""

from __future__ import annotations

from datetime import date

from pydantic import Field

from portal.core.model import StrictModel


class Student(StrictModel):
    """A student enrolled through the portal.

    The student id is chosen by the registering office, not generated.
    """

    student_id: str = Field(alias="studentId", min_length=1, max_length=20)
    full_name: str = Field(alias="fullName", min_length=1, max_length=200)
    gender: bool | None = None
    address: str | None = None
    date_of_birth: date | None = Field(default=None, alias="dob")
    place_of_birth: str | None = Field(default=None, alias="pob")
    occupation: str | None = None
    social_network: str | None = Field(default=None, alias="socialNetwork")


class Staff(StrictModel):
    """A staff member (teacher, consultant, administrator)."""

    staff_id: str = Field(alias="staffId", min_length=1, max_length=20)
    full_name: str = Field(alias="fullName", min_length=1, max_length=200)
    email: str | None = None
    phone: str | None = None
    position: str | None = None
    branch: str | None = None
