"""Staff API router.

- GET    /api/v1/staff              - List all staff members
- POST   /api/v1/staff              - Create staff member
- GET    /api/v1/staff/{staff_id}   - Get staff member
- PUT    /api/v1/staff/{staff_id}   - Update staff member
- DELETE /api/v1/staff/{staff_id}   - Delete staff member
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response

from portal.api.deps import CacheDep, UnitOfWorkDep
from portal.api.errors import BadRequestError, ConflictError, NotFoundError
from portal.cache import CachedCollection, CacheKeys
from portal.core.model import Staff

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/staff", tags=["Staff"])


def get_staff_collection(cache: CacheDep, uow: UnitOfWorkDep) -> CachedCollection[Staff]:
    return CachedCollection(cache, CacheKeys.STAFF, Staff, uow.staff.get_all, id_field="staff_id")


StaffMembers = Annotated[CachedCollection[Staff], Depends(get_staff_collection)]


@router.get("", response_model=list[Staff])
async def get_staff(staff: StaffMembers) -> list[Staff]:
    items = await staff.load()
    if not items:
        raise NotFoundError("Staff")
    return items


@router.get("/{staff_id}", response_model=Staff)
async def get_staff_by_id(staff_id: str, staff: StaffMembers) -> Staff:
    member = await staff.find(staff_id)
    if member is None:
        raise NotFoundError("Staff", staff_id)
    return member


@router.post("", status_code=201, response_model=Staff)
async def post_staff(
    member: Staff, response: Response, staff: StaffMembers, uow: UnitOfWorkDep
) -> Staff:
    if await uow.staff.exists(member.staff_id):
        raise ConflictError("Staff", member.staff_id)

    created = await uow.execute_transaction(lambda: uow.staff.insert(member))
    await staff.added(created)

    logger.info(f"Created staff member {created.staff_id}")
    response.headers["Location"] = f"{router.prefix}/{created.staff_id}"
    return created


@router.put("/{staff_id}", response_model=Staff)
async def put_staff(
    staff_id: str, member: Staff, staff: StaffMembers, uow: UnitOfWorkDep
) -> Staff:
    if member.staff_id != staff_id:
        raise BadRequestError("Staff id in body does not match the path")

    updated = await uow.execute_transaction(lambda: uow.staff.update(member))
    if updated is None:
        raise NotFoundError("Staff", staff_id)

    await staff.updated(updated)
    return updated


@router.delete("/{staff_id}", status_code=204)
async def delete_staff(staff_id: str, staff: StaffMembers, uow: UnitOfWorkDep) -> Response:
    if not await uow.staff.exists(staff_id):
        raise NotFoundError("Staff", staff_id)

    await uow.execute_transaction(lambda: uow.staff.delete(staff_id))
    await staff.removed(staff_id)

    logger.info(f"Deleted staff member {staff_id}")
    return Response(status_code=204)
