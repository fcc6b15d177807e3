"""Repository pattern for portal persistence.

``BaseRepository`` carries the generic CRUD and query operations; the
entity repositories bind it to one table/model pair and add the few
domain queries the API needs. Repositories only flush: committing is the
job of ``UnitOfWork.execute_transaction``.
"""

from __future__ import annotations

from collections.abc import Hashable
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import delete, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from portal.core.model import (
    Course,
    CourseRegistration,
    PaymentMethod,
    Staff,
    StrictModel,
    Student,
    StudentProgress,
)
from portal.core.specification import Criteria, Specification, where
from portal.persistence.tables import (
    Base,
    CourseRegistrationTable,
    CourseTable,
    PaymentMethodTable,
    StaffTable,
    StudentProgressTable,
    StudentTable,
)

ModelT = TypeVar("ModelT", bound=StrictModel)
TableT = TypeVar("TableT", bound=Base)


class BaseRepository(Generic[ModelT, TableT]):
    """Base repository with common CRUD operations."""

    table: ClassVar[type[Any]]
    model: ClassVar[type[Any]]
    id_field: ClassVar[str] = "id"

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_model(self, row: TableT) -> ModelT:
        return self.model.model_validate(row)  # type: ignore[no-any-return]

    def _select(self, spec: Specification[TableT] | None = None) -> Select[tuple[TableT]]:
        stmt = select(self.table)
        if spec is not None:
            stmt = stmt.where(spec.criteria)
        return stmt

    # -------------------------------------------------------------------------
    # Write operations
    # -------------------------------------------------------------------------

    async def insert(self, item: ModelT) -> ModelT:
        """Insert a new row.

        Returns the stored entity, including generated identifiers.
        """
        row = self.table(**item.model_dump(exclude_none=True))
        self.session.add(row)
        await self.session.flush()
        return self._to_model(row)

    async def update(self, item: ModelT) -> ModelT | None:
        """Overwrite an existing row with ``item``.

        Returns:
            The updated entity, or None if no row has the item's id.
        """
        row = await self.session.get(self.table, getattr(item, self.id_field))
        if row is None:
            return None

        for name, value in item.model_dump(exclude={self.id_field}).items():
            setattr(row, name, value)

        await self.session.flush()
        return self._to_model(row)

    async def delete(self, identifier: Hashable) -> bool:
        """Delete one row by id.

        Returns:
            True if deleted, False if not found.
        """
        row = await self.session.get(self.table, identifier)
        if row is None:
            return False

        await self.session.delete(row)
        await self.session.flush()
        return True

    async def delete_where(self, spec: Specification[TableT]) -> int:
        """Delete every row matching ``spec``. Returns the number of rows deleted."""
        result = await self.session.execute(delete(self.table).where(spec.criteria))
        await self.session.flush()
        return int(result.rowcount or 0)  # type: ignore[attr-defined]

    # -------------------------------------------------------------------------
    # Read operations
    # -------------------------------------------------------------------------

    async def get_by_id(self, identifier: Hashable | None) -> ModelT | None:
        if identifier is None:
            return None
        row = await self.session.get(self.table, identifier)
        return None if row is None else self._to_model(row)

    async def exists(self, identifier: Hashable | None) -> bool:
        return await self.get_by_id(identifier) is not None

    async def count(self, spec: Specification[TableT] | None = None) -> int:
        stmt = select(func.count()).select_from(self.table)
        if spec is not None:
            stmt = stmt.where(spec.criteria)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def get_all(self) -> list[ModelT]:
        result = await self.session.execute(self._select())
        return [self._to_model(row) for row in result.scalars()]

    async def get_many(self, spec: Specification[TableT]) -> list[ModelT]:
        result = await self.session.execute(self._select(spec))
        return [self._to_model(row) for row in result.scalars()]

    async def get_list(self, criteria: Criteria[TableT]) -> list[ModelT]:
        """Filtered, ordered and paged query."""
        stmt = self._select(criteria.filter)
        for column in criteria.order_by:
            stmt = stmt.order_by(column.asc() if criteria.ascending else column.desc())
        if criteria.skip:
            stmt = stmt.offset(criteria.skip)
        if criteria.take:
            stmt = stmt.limit(criteria.take)

        result = await self.session.execute(stmt)
        return [self._to_model(row) for row in result.scalars()]

    async def any(self, spec: Specification[TableT]) -> bool:
        result = await self.session.execute(select(exists().where(spec.criteria)))
        return bool(result.scalar())


class StudentRepository(BaseRepository[Student, StudentTable]):
    table = StudentTable
    model = Student
    id_field = "student_id"

    async def id_taken(self, student_id: str) -> bool:
        """Whether an id equal to ``student_id`` ignoring case is in use.

        Per-student cache records are keyed by the lower-cased id, so ids
        differing only in case would share one record.
        """
        return await self.any(where(func.lower(StudentTable.student_id) == student_id.lower()))

    async def search_by_name(self, fragment: str) -> list[Student]:
        """Case-insensitive substring search on the full name."""
        return await self.get_list(
            Criteria(
                filter=where(StudentTable.full_name.ilike(f"%{fragment}%")),
                order_by=[StudentTable.full_name],
            )
        )


class StaffRepository(BaseRepository[Staff, StaffTable]):
    table = StaffTable
    model = Staff
    id_field = "staff_id"


class CourseRepository(BaseRepository[Course, CourseTable]):
    table = CourseTable
    model = Course
    id_field = "course_id"


class PaymentMethodRepository(BaseRepository[PaymentMethod, PaymentMethodTable]):
    table = PaymentMethodTable
    model = PaymentMethod

    async def name_taken(self, name: str, exclude_id: int | None = None) -> bool:
        spec = where(func.lower(PaymentMethodTable.name) == name.lower())
        if exclude_id is not None:
            spec = spec & where(PaymentMethodTable.id != exclude_id)
        return await self.any(spec)


class CourseRegistrationRepository(BaseRepository[CourseRegistration, CourseRegistrationTable]):
    table = CourseRegistrationTable
    model = CourseRegistration

    async def for_student(self, student_id: str) -> list[CourseRegistration]:
        return await self.get_list(
            Criteria(
                filter=where(CourseRegistrationTable.student_id == student_id),
                order_by=[CourseRegistrationTable.register_date],
            )
        )


class StudentProgressRepository(BaseRepository[StudentProgress, StudentProgressTable]):
    table = StudentProgressTable
    model = StudentProgress

    async def for_student(self, student_id: str) -> list[StudentProgress]:
        return await self.get_many(where(StudentProgressTable.student_id == student_id))
