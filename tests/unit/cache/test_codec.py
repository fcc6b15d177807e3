"""Tests for the cache JSON codec."""

from __future__ import annotations

from datetime import date
from uuid import UUID

import orjson
import pytest

from portal.cache.codec import decode, encode
from portal.cache.errors import SerializationError
from portal.core.model import CourseRegistration, Student


class TestEncode:
    def test_models_are_dumped_as_json(self) -> None:
        """Dates inside models are written as ISO strings."""
        student = Student(student_id="SV001", full_name="An Nguyen", date_of_birth=date(2001, 5, 2))
        data = orjson.loads(encode("k", [student]))
        assert data[0]["student_id"] == "SV001"
        assert data[0]["date_of_birth"] == "2001-05-02"

    def test_unserializable_value_raises(self) -> None:
        with pytest.raises(SerializationError) as exc_info:
            encode("portal:Broken", object())
        assert exc_info.value.key == "portal:Broken"


class TestDecode:
    def test_without_model_returns_plain_json(self) -> None:
        assert decode("k", b'{"a": [1, 2]}') == {"a": [1, 2]}

    def test_with_model_validates(self) -> None:
        raw = encode(
            "k",
            [
                CourseRegistration(
                    id=UUID("12345678-1234-5678-1234-567812345678"),
                    student_id="SV001",
                    course_id="PY101",
                    register_date=date(2026, 1, 5),
                    fee=100.0,
                )
            ],
        )
        [registration] = decode("k", raw, list[CourseRegistration])
        assert isinstance(registration, CourseRegistration)
        assert registration.id == UUID("12345678-1234-5678-1234-567812345678")
        assert registration.register_date == date(2026, 1, 5)

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(SerializationError):
            decode("k", b"not json")

    def test_shape_mismatch_raises(self) -> None:
        """A payload that does not fit the requested type is a serialization error."""
        with pytest.raises(SerializationError) as exc_info:
            decode("portal:StudentData", b'{"unexpected": true}', list[Student])
        assert "portal:StudentData" in str(exc_info.value)
