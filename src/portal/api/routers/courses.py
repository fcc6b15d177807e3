"""Course API router.

- GET    /api/v1/courses              - List all courses
- POST   /api/v1/courses              - Create course
- GET    /api/v1/courses/{course_id}  - Get course
- PUT    /api/v1/courses/{course_id}  - Update course
- DELETE /api/v1/courses/{course_id}  - Delete course
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response

from portal.api.deps import CacheDep, UnitOfWorkDep
from portal.api.errors import BadRequestError, ConflictError, NotFoundError
from portal.cache import CachedCollection, CacheKeys
from portal.core.model import Course

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/courses", tags=["Courses"])


def get_course_collection(cache: CacheDep, uow: UnitOfWorkDep) -> CachedCollection[Course]:
    return CachedCollection(
        cache, CacheKeys.COURSES, Course, uow.courses.get_all, id_field="course_id"
    )


Courses = Annotated[CachedCollection[Course], Depends(get_course_collection)]


@router.get("", response_model=list[Course])
async def get_courses(courses: Courses) -> list[Course]:
    items = await courses.load()
    if not items:
        raise NotFoundError("Course")
    return items


@router.get("/{course_id}", response_model=Course)
async def get_course_by_id(course_id: str, courses: Courses) -> Course:
    course = await courses.find(course_id)
    if course is None:
        raise NotFoundError("Course", course_id)
    return course


@router.post("", status_code=201, response_model=Course)
async def post_course(
    course: Course, response: Response, courses: Courses, uow: UnitOfWorkDep
) -> Course:
    if await uow.courses.exists(course.course_id):
        raise ConflictError("Course", course.course_id)

    created = await uow.execute_transaction(lambda: uow.courses.insert(course))
    await courses.added(created)

    logger.info(f"Created course {created.course_id}")
    response.headers["Location"] = f"{router.prefix}/{created.course_id}"
    return created


@router.put("/{course_id}", response_model=Course)
async def put_course(
    course_id: str, course: Course, courses: Courses, uow: UnitOfWorkDep
) -> Course:
    if course.course_id != course_id:
        raise BadRequestError("Course id in body does not match the path")

    updated = await uow.execute_transaction(lambda: uow.courses.update(course))
    if updated is None:
        raise NotFoundError("Course", course_id)

    await courses.updated(updated)
    return updated


@router.delete("/{course_id}", status_code=204)
async def delete_course(course_id: str, courses: Courses, uow: UnitOfWorkDep) -> Response:
    if not await uow.courses.exists(course_id):
        raise NotFoundError("Course", course_id)

    await uow.execute_transaction(lambda: uow.courses.delete(course_id))
    await courses.removed(course_id)

    logger.info(f"Deleted course {course_id}")
    return Response(status_code=204)
