"""Tests for structured logging and correlation context."""

from __future__ import annotations

import json
import logging
import sys

import pytest
from httpx import AsyncClient

from portal.observability.logging import (
    ConsoleFormatter,
    JsonFormatter,
    LogContext,
    configure_logging,
    correlation_id_var,
    request_id_var,
)


def make_record(message: str = "Cache miss: portal:StudentData", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="portal.cache.redis",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_basic_fields(self) -> None:
        data = json.loads(JsonFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "portal.cache.redis"
        assert data["message"] == "Cache miss: portal:StudentData"
        assert data["location"].startswith("test_logging.")
        assert "request_id" not in data

    def test_includes_correlation_context(self) -> None:
        with LogContext(request_id="req-1", correlation_id="corr-1"):
            data = json.loads(JsonFormatter().format(make_record()))

        assert data["request_id"] == "req-1"
        assert data["correlation_id"] == "corr-1"

    def test_includes_extra_fields(self) -> None:
        data = json.loads(JsonFormatter().format(make_record(cache_key="portal:CourseData")))
        assert data["cache_key"] == "portal:CourseData"

    def test_includes_exception(self) -> None:
        try:
            raise ValueError("bad key")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad key"


class TestConsoleFormatter:
    def test_format_with_request_id(self) -> None:
        with LogContext(request_id="abcdef123456"):
            line = ConsoleFormatter(use_colors=False).format(make_record())

        assert line.endswith("portal.cache.redis  Cache miss: portal:StudentData [req=abcdef12]")
        assert " INFO " in line


class TestLogContext:
    def test_restores_previous_values(self) -> None:
        with LogContext(request_id="outer"):
            with LogContext(request_id="inner", correlation_id="c"):
                assert request_id_var.get() == "inner"
            assert request_id_var.get() == "outer"
            assert correlation_id_var.get() == ""
        assert request_id_var.get() == ""


class TestConfigureLogging:
    def test_installs_single_handler(self) -> None:
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_logging(json_format=True, level="debug")
            configure_logging(json_format=True, level="DEBUG")

            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JsonFormatter)
            assert root.level == logging.DEBUG
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


class TestCorrelationMiddleware:
    @pytest.mark.asyncio
    async def test_generates_request_id(self, client: AsyncClient) -> None:
        response = await client.get("/health/live")

        request_id = response.headers["x-request-id"]
        assert request_id
        assert response.headers["x-correlation-id"] == request_id

    @pytest.mark.asyncio
    async def test_propagates_incoming_ids(self, client: AsyncClient) -> None:
        response = await client.get(
            "/health/live", headers={"x-request-id": "req-9", "x-correlation-id": "corr-9"}
        )

        assert response.headers["x-request-id"] == "req-9"
        assert response.headers["x-correlation-id"] == "corr-9"
