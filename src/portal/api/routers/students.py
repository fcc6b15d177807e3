"""Student API router.

- GET    /api/v1/students                            - List all students
- GET    /api/v1/students/search?name=...            - Search students by name
- POST   /api/v1/students                            - Create student
- GET    /api/v1/students/{student_id}               - Get student
- PUT    /api/v1/students/{student_id}               - Update student
- DELETE /api/v1/students/{student_id}               - Delete student
- GET    /api/v1/students/{student_id}/progress      - Progress records of one student
- GET    /api/v1/students/{student_id}/registrations - Course registrations of one student

Reads are served from the cached "StudentData" collection. Writes go to the
database first and are then applied to the cached view. Search and
registrations query the database directly.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from portal.api.deps import CacheDep, UnitOfWorkDep
from portal.api.errors import BadRequestError, ConflictError, NotFoundError
from portal.cache import CachedCollection, CacheKeys
from portal.core.model import CourseRegistration, Student, StudentProgress

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/students", tags=["Students"])


def get_student_collection(cache: CacheDep, uow: UnitOfWorkDep) -> CachedCollection[Student]:
    return CachedCollection(
        cache, CacheKeys.STUDENTS, Student, uow.students.get_all, id_field="student_id"
    )


Students = Annotated[CachedCollection[Student], Depends(get_student_collection)]


@router.get("", response_model=list[Student])
async def get_students(students: Students) -> list[Student]:
    """Get all students."""
    items = await students.load()
    if not items:
        raise NotFoundError("Student")
    return items


@router.get("/search", response_model=list[Student])
async def search_students(
    uow: UnitOfWorkDep, name: str = Query(min_length=1, max_length=100)
) -> list[Student]:
    """Students whose full name contains ``name``, ignoring case."""
    return await uow.students.search_by_name(name)


@router.get("/{student_id}", response_model=Student)
async def get_student_by_id(student_id: str, students: Students) -> Student:
    """Get a student by id."""
    student = await students.find(student_id)
    if student is None:
        raise NotFoundError("Student", student_id)
    return student


@router.get("/{student_id}/progress", response_model=list[StudentProgress])
async def get_student_progress(
    student_id: str, cache: CacheDep, uow: UnitOfWorkDep
) -> list[StudentProgress]:
    """Get the progress records of one student.

    Cached per student as one field of the progress hash record.
    """
    if not await uow.students.exists(student_id):
        raise NotFoundError("Student", student_id)

    return await cache.hash_get_or_set(
        CacheKeys.PROGRESS_BY_STUDENT,
        student_id,
        lambda: uow.student_progress.for_student(student_id),
        model=list[StudentProgress],
    )


@router.get("/{student_id}/registrations", response_model=list[CourseRegistration])
async def get_student_registrations(
    student_id: str, uow: UnitOfWorkDep
) -> list[CourseRegistration]:
    """Course registrations of one student, oldest first."""
    if not await uow.students.exists(student_id):
        raise NotFoundError("Student", student_id)
    return await uow.course_registrations.for_student(student_id)


@router.post("", status_code=201, response_model=Student)
async def post_student(
    student: Student, response: Response, students: Students, uow: UnitOfWorkDep
) -> Student:
    """Create a new student.

    Ids differing only in case count as the same student.
    """
    if await uow.students.id_taken(student.student_id):
        raise ConflictError("Student", student.student_id)

    created = await uow.execute_transaction(lambda: uow.students.insert(student))
    await students.added(created)

    logger.info(f"Created student {created.student_id}")
    response.headers["Location"] = f"{router.prefix}/{created.student_id}"
    return created


@router.put("/{student_id}", response_model=Student)
async def put_student(
    student_id: str, student: Student, students: Students, uow: UnitOfWorkDep
) -> Student:
    """Update an existing student."""
    if student.student_id != student_id:
        raise BadRequestError("Student id in body does not match the path")

    updated = await uow.execute_transaction(lambda: uow.students.update(student))
    if updated is None:
        raise NotFoundError("Student", student_id)

    await students.updated(updated)
    logger.info(f"Updated student {student_id}")
    return updated


@router.delete("/{student_id}", status_code=204)
async def delete_student(
    student_id: str, students: Students, cache: CacheDep, uow: UnitOfWorkDep
) -> Response:
    """Delete a student along with the cached progress record."""
    if not await uow.students.exists(student_id):
        raise NotFoundError("Student", student_id)

    await uow.execute_transaction(lambda: uow.students.delete(student_id))
    await students.removed(student_id)
    # Progress rows go with the student; the hash record has no TTL
    await cache.remove(CacheKeys.PROGRESS_BY_STUDENT)

    logger.info(f"Deleted student {student_id}")
    return Response(status_code=204)
