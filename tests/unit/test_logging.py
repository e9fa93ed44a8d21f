"""Unit tests for samplegraph/utils/logging.py request-id helpers."""

from __future__ import annotations

import pytest
import structlog

from samplegraph.utils.logging import bind_request_id, clear_request_id


@pytest.fixture(autouse=True)
def _clean_context():
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


class TestBindRequestId:
    def test_keeps_safe_client_id(self) -> None:
        assert bind_request_id("req-42.a_b") == "req-42.a_b"
        assert structlog.contextvars.get_contextvars()["request_id"] == "req-42.a_b"

    @pytest.mark.parametrize("raw", [None, "", "has space", "x" * 65, "semi;colon"])
    def test_generates_id_for_missing_or_unsafe(self, raw: str | None) -> None:
        request_id = bind_request_id(raw)

        assert request_id != raw
        assert len(request_id) == 32
        assert structlog.contextvars.get_contextvars()["request_id"] == request_id

    def test_clear_removes_only_request_id(self) -> None:
        structlog.contextvars.bind_contextvars(other="kept")
        bind_request_id("abc")

        clear_request_id()

        assert structlog.contextvars.get_contextvars() == {"other": "kept"}
