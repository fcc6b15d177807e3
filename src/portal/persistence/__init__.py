"""Persistence layer for the portal.

This module provides:
- An async SQLAlchemy engine and session factory per database
- ORM tables for the portal entities
- Generic and per-entity repositories
- A unit of work that commits or rolls back one request's changes
"""

from portal.persistence.db import Database
from portal.persistence.repositories import (
    BaseRepository,
    CourseRegistrationRepository,
    CourseRepository,
    PaymentMethodRepository,
    StaffRepository,
    StudentProgressRepository,
    StudentRepository,
)
from portal.persistence.unit_of_work import UnitOfWork

__all__ = [
    # DB
    "Database",
    # Repositories
    "BaseRepository",
    "StudentRepository",
    "StaffRepository",
    "CourseRepository",
    "PaymentMethodRepository",
    "CourseRegistrationRepository",
    "StudentProgressRepository",
    "UnitOfWork",
]
