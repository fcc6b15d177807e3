"""Student progress API router.

- GET    /api/v1/student-progress               - List progress records
- POST   /api/v1/student-progress               - Create progress record
- GET    /api/v1/student-progress/{progress_id} - Get progress record
- PUT    /api/v1/student-progress/{progress_id} - Update progress record
- DELETE /api/v1/student-progress/{progress_id} - Delete progress record

Besides the "StudentProgressData" collection, progress is cached per student
in a hash record (see the students router). Hash fields have no TTL, so
every write here drops that record.
"""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response

from portal.api.deps import CacheDep, UnitOfWorkDep
from portal.api.errors import BadRequestError, NotFoundError
from portal.cache import CachedCollection, CacheKeys
from portal.core.model import StudentProgress

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/student-progress", tags=["Student Progress"])


def get_progress_collection(
    cache: CacheDep, uow: UnitOfWorkDep
) -> CachedCollection[StudentProgress]:
    return CachedCollection(
        cache, CacheKeys.STUDENT_PROGRESS, StudentProgress, uow.student_progress.get_all
    )


ProgressRecords = Annotated[CachedCollection[StudentProgress], Depends(get_progress_collection)]


@router.get("", response_model=list[StudentProgress])
async def get_progress_records(progress: ProgressRecords) -> list[StudentProgress]:
    items = await progress.load()
    if not items:
        raise NotFoundError("StudentProgress")
    return items


@router.get("/{progress_id}", response_model=StudentProgress)
async def get_progress_by_id(progress_id: UUID, progress: ProgressRecords) -> StudentProgress:
    record = await progress.find(progress_id)
    if record is None:
        raise NotFoundError("StudentProgress", progress_id)
    return record


@router.post("", status_code=201, response_model=StudentProgress)
async def post_progress(
    record: StudentProgress,
    response: Response,
    progress: ProgressRecords,
    cache: CacheDep,
    uow: UnitOfWorkDep,
) -> StudentProgress:
    if record.id is not None:
        raise BadRequestError("Student progress id is auto generated")
    if not await uow.students.exists(record.student_id):
        raise BadRequestError(f"Unknown student '{record.student_id}'")

    created = await uow.execute_transaction(lambda: uow.student_progress.insert(record))
    await progress.added(created)
    await cache.remove(CacheKeys.PROGRESS_BY_STUDENT)

    response.headers["Location"] = f"{router.prefix}/{created.id}"
    return created


@router.put("/{progress_id}", response_model=StudentProgress)
async def put_progress(
    progress_id: UUID,
    record: StudentProgress,
    progress: ProgressRecords,
    cache: CacheDep,
    uow: UnitOfWorkDep,
) -> StudentProgress:
    if record.id not in (None, progress_id):
        raise BadRequestError("Student progress id in body does not match the path")

    changes = record.model_copy(update={"id": progress_id})
    updated = await uow.execute_transaction(lambda: uow.student_progress.update(changes))
    if updated is None:
        raise NotFoundError("StudentProgress", progress_id)

    await progress.updated(updated)
    await cache.remove(CacheKeys.PROGRESS_BY_STUDENT)
    return updated


@router.delete("/{progress_id}", status_code=204)
async def delete_progress(
    progress_id: UUID, progress: ProgressRecords, cache: CacheDep, uow: UnitOfWorkDep
) -> Response:
    if not await uow.student_progress.exists(progress_id):
        raise NotFoundError("StudentProgress", progress_id)

    await uow.execute_transaction(lambda: uow.student_progress.delete(progress_id))
    await progress.removed(progress_id)
    await cache.remove(CacheKeys.PROGRESS_BY_STUDENT)

    logger.info(f"Deleted student progress {progress_id}")
    return Response(status_code=204)
