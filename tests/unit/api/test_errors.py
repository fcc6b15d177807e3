"""Tests for the uniform error responses."""

import orjson

from portal.api.errors import (
    BadRequestError,
    ConflictError,
    InternalServerError,
    Message,
    MessageType,
    NotFoundError,
    Result,
)


class TestMessage:
    """Test Message model."""

    def test_serialized_with_camel_case_type(self) -> None:
        msg = Message(code="NotFound", message_type=MessageType.ERROR, text="Not found")
        assert msg.model_dump(by_alias=True)["messageType"] == MessageType.ERROR

    def test_result_with_messages(self) -> None:
        result = Result(
            messages=[
                Message(code="E1", message_type=MessageType.ERROR, text="First"),
                Message(code="E2", message_type=MessageType.WARNING, text="Second"),
            ]
        )
        assert len(result.messages) == 2


class TestPortalApiErrors:
    """Test the HTTP error types."""

    def test_not_found_with_identifier(self) -> None:
        error = NotFoundError("Student", "SV001")
        assert error.status_code == 404
        assert error.text == "Student with identifier 'SV001' not found"

    def test_not_found_without_identifier(self) -> None:
        assert NotFoundError("Course").text == "No Course found"

    def test_conflict(self) -> None:
        error = ConflictError("PaymentMethod", "Cash")
        assert error.status_code == 409
        assert error.code == "Conflict"

    def test_bad_request(self) -> None:
        assert BadRequestError("Payment method id is auto generated").status_code == 400

    def test_internal_error_is_exception_type(self) -> None:
        error = InternalServerError()
        assert error.status_code == 500
        assert error.message_type == MessageType.EXCEPTION

    def test_to_result(self) -> None:
        """Every error converts to a single-message result with a timestamp."""
        result = NotFoundError("Student", "SV001").to_result()
        body = orjson.loads(orjson.dumps(result.model_dump(by_alias=True, mode="json")))

        [message] = body["messages"]
        assert message["code"] == "NotFound"
        assert message["messageType"] == "Error"
        assert message["timestamp"] is not None
