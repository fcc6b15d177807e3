"""Unit of work bundling the portal repositories around one session."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from portal.persistence.repositories import (
    CourseRegistrationRepository,
    CourseRepository,
    PaymentMethodRepository,
    StaffRepository,
    StudentProgressRepository,
    StudentRepository,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UnitOfWork:
    """All repositories of one request, sharing a session and transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.students = StudentRepository(session)
        self.staff = StaffRepository(session)
        self.courses = CourseRepository(session)
        self.payment_methods = PaymentMethodRepository(session)
        self.course_registrations = CourseRegistrationRepository(session)
        self.student_progress = StudentProgressRepository(session)

    async def execute_transaction(self, action: Callable[[], Awaitable[T]]) -> T:
        """Run ``action`` and commit, rolling back if it raises."""
        try:
            result = await action()
            await self.session.commit()
            return result
        except Exception:
            logger.warning("Rolling back transaction", exc_info=True)
            await self.session.rollback()
            raise
