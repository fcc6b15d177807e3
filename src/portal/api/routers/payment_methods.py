"""Payment method API router.

- GET    /api/v1/payment-methods                     - List payment methods
- POST   /api/v1/payment-methods                     - Create payment method
- GET    /api/v1/payment-methods/{payment_method_id} - Get payment method
- PUT    /api/v1/payment-methods/{payment_method_id} - Update payment method
- DELETE /api/v1/payment-methods/{payment_method_id} - Delete payment method

Payment method ids are generated by the database.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response

from portal.api.deps import CacheDep, UnitOfWorkDep
from portal.api.errors import BadRequestError, ConflictError, NotFoundError
from portal.cache import CachedCollection, CacheKeys
from portal.core.model import PaymentMethod

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/payment-methods", tags=["Payment Methods"])


def get_payment_method_collection(
    cache: CacheDep, uow: UnitOfWorkDep
) -> CachedCollection[PaymentMethod]:
    return CachedCollection(
        cache, CacheKeys.PAYMENT_METHODS, PaymentMethod, uow.payment_methods.get_all
    )


PaymentMethods = Annotated[
    CachedCollection[PaymentMethod], Depends(get_payment_method_collection)
]


@router.get("", response_model=list[PaymentMethod])
async def get_payment_methods(payment_methods: PaymentMethods) -> list[PaymentMethod]:
    items = await payment_methods.load()
    if not items:
        raise NotFoundError("PaymentMethod")
    return items


@router.get("/{payment_method_id}", response_model=PaymentMethod)
async def get_payment_method_by_id(
    payment_method_id: int, payment_methods: PaymentMethods
) -> PaymentMethod:
    payment_method = await payment_methods.find(payment_method_id)
    if payment_method is None:
        raise NotFoundError("PaymentMethod", payment_method_id)
    return payment_method


@router.post("", status_code=201, response_model=PaymentMethod)
async def post_payment_method(
    payment_method: PaymentMethod,
    response: Response,
    payment_methods: PaymentMethods,
    uow: UnitOfWorkDep,
) -> PaymentMethod:
    """Create a new payment method. The id is generated."""
    if payment_method.id is not None:
        logger.warning(f"Rejected client-supplied payment method id {payment_method.id}")
        raise BadRequestError("Payment method id is auto generated")

    if await uow.payment_methods.name_taken(payment_method.name):
        raise ConflictError("PaymentMethod", payment_method.name)

    created = await uow.execute_transaction(lambda: uow.payment_methods.insert(payment_method))
    await payment_methods.added(created)

    logger.info(f"Created payment method {created.id}")
    response.headers["Location"] = f"{router.prefix}/{created.id}"
    return created


@router.put("/{payment_method_id}", response_model=PaymentMethod)
async def put_payment_method(
    payment_method_id: int,
    payment_method: PaymentMethod,
    payment_methods: PaymentMethods,
    uow: UnitOfWorkDep,
) -> PaymentMethod:
    if payment_method.id not in (None, payment_method_id):
        raise BadRequestError("Payment method id in body does not match the path")

    if await uow.payment_methods.name_taken(payment_method.name, exclude_id=payment_method_id):
        raise ConflictError("PaymentMethod", payment_method.name)

    changes = payment_method.model_copy(update={"id": payment_method_id})
    updated = await uow.execute_transaction(lambda: uow.payment_methods.update(changes))
    if updated is None:
        raise NotFoundError("PaymentMethod", payment_method_id)

    await payment_methods.updated(updated)
    return updated


@router.delete("/{payment_method_id}", status_code=204)
async def delete_payment_method(
    payment_method_id: int, payment_methods: PaymentMethods, uow: UnitOfWorkDep
) -> Response:
    if not await uow.payment_methods.exists(payment_method_id):
        raise NotFoundError("PaymentMethod", payment_method_id)

    await uow.execute_transaction(lambda: uow.payment_methods.delete(payment_method_id))
    await payment_methods.removed(payment_method_id)

    logger.info(f"Deleted payment method {payment_method_id}")
    return Response(status_code=204)
