"""Composable query specifications.

A specification wraps a SQLAlchemy boolean clause over one table. Small
specifications combine with ``&``, ``|`` and ``~`` into the filter of a
repository query:

    active = where(CourseRegistrationTable.status == "active")
    unpaid = where(CourseRegistrationTable.payment_method_id.is_(None))
    rows = await repo.get_many(active & ~unpaid)

``Criteria`` bundles a filter with ordering and paging for ``get_list``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, and_, not_, or_

T = TypeVar("T")


class Specification(ABC, Generic[T]):
    """Predicate over rows of ``T`` expressed as a SQL clause."""

    @property
    @abstractmethod
    def criteria(self) -> ColumnElement[bool]:
        """SQL clause selecting the rows that satisfy the specification."""

    def __and__(self, other: Specification[T]) -> Specification[T]:
        return AndSpecification(self, other)

    def __or__(self, other: Specification[T]) -> Specification[T]:
        return OrSpecification(self, other)

    def __invert__(self) -> Specification[T]:
        return NotSpecification(self)


class ExpressionSpecification(Specification[T]):
    """Specification backed by a ready-made clause."""

    def __init__(self, clause: ColumnElement[bool]):
        self._clause = clause

    @property
    def criteria(self) -> ColumnElement[bool]:
        return self._clause


class AndSpecification(Specification[T]):
    def __init__(self, left: Specification[T], right: Specification[T]):
        self.left = left
        self.right = right

    @property
    def criteria(self) -> ColumnElement[bool]:
        return and_(self.left.criteria, self.right.criteria)


class OrSpecification(Specification[T]):
    def __init__(self, left: Specification[T], right: Specification[T]):
        self.left = left
        self.right = right

    @property
    def criteria(self) -> ColumnElement[bool]:
        return or_(self.left.criteria, self.right.criteria)


class NotSpecification(Specification[T]):
    def __init__(self, inner: Specification[T]):
        self.inner = inner

    @property
    def criteria(self) -> ColumnElement[bool]:
        return not_(self.inner.criteria)


def where(clause: ColumnElement[bool]) -> Specification[Any]:
    """Wrap a SQLAlchemy clause as a specification."""
    return ExpressionSpecification(clause)


@dataclass
class Criteria(Generic[T]):
    """Filter, ordering and paging for a list query.

    ``take=0`` means no limit.
    """

    filter: Specification[T] | None = None
    order_by: Sequence[Any] = field(default_factory=tuple)
    ascending: bool = True
    skip: int = 0
    take: int = 0

    def __post_init__(self) -> None:
        if self.skip < 0 or self.take < 0:
            raise ValueError("skip and take must be non-negative")
