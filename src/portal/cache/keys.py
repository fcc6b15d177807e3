"""Cache key schema for the portal.

Key format: {prefix}:{name}

Where:
- prefix: namespace shared by every key this application writes
  (``settings.cache_prefix``, "portal" by default)
- name: logical collection name such as "StudentData"

Hash records use the same outer key; their field names are lower-cased.
"""

from __future__ import annotations

from typing import Literal

CollectionName = Literal[
    "StudentData",
    "StaffData",
    "CourseData",
    "PaymentMethodData",
    "CourseRegistrationData",
    "StudentProgressData",
    "StudentProgressByStudent",
]


class CacheKeys:
    """Cache key generator for one namespace."""

    STUDENTS: CollectionName = "StudentData"
    STAFF: CollectionName = "StaffData"
    COURSES: CollectionName = "CourseData"
    PAYMENT_METHODS: CollectionName = "PaymentMethodData"
    COURSE_REGISTRATIONS: CollectionName = "CourseRegistrationData"
    STUDENT_PROGRESS: CollectionName = "StudentProgressData"
    # Hash record: one field per student id
    PROGRESS_BY_STUDENT: CollectionName = "StudentProgressByStudent"

    def __init__(self, prefix: str):
        self.prefix = prefix

    def key(self, name: str) -> str:
        """Namespaced key for a logical name."""
        return f"{self.prefix}:{name}"

    def pattern(self, pattern: str = "*") -> str:
        """Glob pattern scoped to the namespace."""
        return f"{self.prefix}:{pattern}"

    @staticmethod
    def field(name: str) -> str:
        """Normalize a hash field name."""
        return name.lower()

    def owns(self, key: str) -> bool:
        """Whether ``key`` lives in this namespace."""
        return key.startswith(f"{self.prefix}:")
