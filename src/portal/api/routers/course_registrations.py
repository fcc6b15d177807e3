"""Course registration API router.

- GET    /api/v1/course-registrations                   - List registrations
- POST   /api/v1/course-registrations                   - Create registration
- GET    /api/v1/course-registrations/{registration_id} - Get registration
- PUT    /api/v1/course-registrations/{registration_id} - Update registration
- DELETE /api/v1/course-registrations/{registration_id} - Delete registration

Registration ids are generated on insert.
"""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response

from portal.api.deps import CacheDep, UnitOfWorkDep
from portal.api.errors import BadRequestError, NotFoundError
from portal.cache import CachedCollection, CacheKeys
from portal.core.model import CourseRegistration
from portal.persistence.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/course-registrations", tags=["Course Registrations"])


def get_registration_collection(
    cache: CacheDep, uow: UnitOfWorkDep
) -> CachedCollection[CourseRegistration]:
    return CachedCollection(
        cache,
        CacheKeys.COURSE_REGISTRATIONS,
        CourseRegistration,
        uow.course_registrations.get_all,
    )


Registrations = Annotated[
    CachedCollection[CourseRegistration], Depends(get_registration_collection)
]


async def _check_references(uow: UnitOfWork, registration: CourseRegistration) -> None:
    """Reject registrations pointing at unknown students, courses or payment methods."""
    if not await uow.students.exists(registration.student_id):
        raise BadRequestError(f"Unknown student '{registration.student_id}'")
    if not await uow.courses.exists(registration.course_id):
        raise BadRequestError(f"Unknown course '{registration.course_id}'")
    if registration.payment_method_id is not None and not await uow.payment_methods.exists(
        registration.payment_method_id
    ):
        raise BadRequestError(f"Unknown payment method {registration.payment_method_id}")


@router.get("", response_model=list[CourseRegistration])
async def get_course_registrations(registrations: Registrations) -> list[CourseRegistration]:
    items = await registrations.load()
    if not items:
        raise NotFoundError("CourseRegistration")
    return items


@router.get("/{registration_id}", response_model=CourseRegistration)
async def get_course_registration_by_id(
    registration_id: UUID, registrations: Registrations
) -> CourseRegistration:
    registration = await registrations.find(registration_id)
    if registration is None:
        raise NotFoundError("CourseRegistration", registration_id)
    return registration


@router.post("", status_code=201, response_model=CourseRegistration)
async def post_course_registration(
    registration: CourseRegistration,
    response: Response,
    registrations: Registrations,
    uow: UnitOfWorkDep,
) -> CourseRegistration:
    """Create a new course registration. The id is generated."""
    if registration.id is not None:
        logger.warning(f"Rejected client-supplied course registration id {registration.id}")
        raise BadRequestError("Course registration id is auto generated")

    await _check_references(uow, registration)

    created = await uow.execute_transaction(
        lambda: uow.course_registrations.insert(registration)
    )
    await registrations.added(created)

    logger.info(f"Created course registration {created.id}")
    response.headers["Location"] = f"{router.prefix}/{created.id}"
    return created


@router.put("/{registration_id}", response_model=CourseRegistration)
async def put_course_registration(
    registration_id: UUID,
    registration: CourseRegistration,
    registrations: Registrations,
    uow: UnitOfWorkDep,
) -> CourseRegistration:
    if registration.id not in (None, registration_id):
        raise BadRequestError("Course registration id in body does not match the path")

    await _check_references(uow, registration)

    changes = registration.model_copy(update={"id": registration_id})
    updated = await uow.execute_transaction(lambda: uow.course_registrations.update(changes))
    if updated is None:
        raise NotFoundError("CourseRegistration", registration_id)

    await registrations.updated(updated)
    return updated


@router.delete("/{registration_id}", status_code=204)
async def delete_course_registration(
    registration_id: UUID, registrations: Registrations, uow: UnitOfWorkDep
) -> Response:
    if not await uow.course_registrations.exists(registration_id):
        raise NotFoundError("CourseRegistration", registration_id)

    await uow.execute_transaction(lambda: uow.course_registrations.delete(registration_id))
    await registrations.removed(registration_id)

    logger.info(f"Deleted course registration {registration_id}")
    return Response(status_code=204)
