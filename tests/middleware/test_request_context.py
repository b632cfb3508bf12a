"""Request context middleware: request IDs and the per-request log line."""

from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from tests.conftest import auth


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    uuid.UUID(resp.headers["x-request-id"])


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    resp = client.get("/health", headers={"X-Request-ID": "checkout-42"})
    assert resp.headers.get("x-request-id") == "checkout-42"


def test_request_id_present_on_error_responses(client: TestClient) -> None:
    resp = client.get("/users")  # no token -> 401
    assert resp.status_code == 401
    assert resp.headers.get("x-request-id") is not None


def test_summary_line_carries_caller_email(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="fluency_api.middleware.request_context"):
        client.get(
            "/enrolled",
            params={"email": "student@example.com"},
            headers={**auth("student@example.com"), "X-Request-ID": "rid-1"},
        )

    summaries = [
        r for r in caplog.records if r.name == "fluency_api.middleware.request_context"
    ]
    assert summaries
    record = summaries[-1]
    assert record.user_email == "student@example.com"
    assert record.status_code == 200
    assert record.request_id == "rid-1"


def test_denials_are_logged_at_warning(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING):
        client.get(
            "/enrolled",
            params={"email": "victim@example.com"},
            headers=auth("snoop@example.com"),
        )
    assert any(
        "snoop@example.com" in r.getMessage() and r.levelno == logging.WARNING
        for r in caplog.records
    )
