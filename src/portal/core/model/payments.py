"""Payment methods accepted for course fees."""

from __future__ import annotations

from pydantic import Field

from portal.core.model import StrictModel


class PaymentMethod(StrictModel):
    """Payment method. The id is assigned by the database."""

    id: int | None = None
    name: str = Field(min_length=1, max_length=100)
