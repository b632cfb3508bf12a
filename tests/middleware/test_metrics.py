"""Prometheus metrics tests.

The default registry is global and counters never reset, so every test
asserts on the delta between a reading before and after the action.
"""

from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tests.conftest import auth, seed_course


def _get_sample(name: str, labels: dict | None = None) -> float:
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def test_request_counter_increments(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/health")
    assert _get_sample("http_requests_total", labels) - before >= 1


def test_request_duration_histogram_observes(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health"}
    before = _get_sample("http_request_duration_seconds_count", labels)
    client.get("/health")
    assert _get_sample("http_request_duration_seconds_count", labels) - before >= 1


def test_endpoint_label_is_route_template(client: TestClient) -> None:
    labels = {
        "method": "GET",
        "endpoint": "/courses/{course_id}",
        "status_code": "404",
    }
    before = _get_sample("http_requests_total", labels)
    client.get(f"/courses/{uuid4()}")
    client.get(f"/courses/{uuid4()}")
    assert _get_sample("http_requests_total", labels) - before == 2


def test_unmatched_paths_share_one_label(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "unmatched", "status_code": "404"}
    before = _get_sample("http_requests_total", labels)
    client.get("/wp-admin/setup.php")
    client.get("/.env")
    assert _get_sample("http_requests_total", labels) - before == 2


def test_authz_denials_counted(client: TestClient) -> None:
    before = _get_sample("authz_denials_total", {"reason": "forbidden"})
    client.get(
        "/payments",
        params={"email": "victim@example.com"},
        headers=auth("snoop@example.com"),
    )
    assert _get_sample("authz_denials_total", {"reason": "forbidden"}) - before == 1


def test_purchase_outcomes_counted(client: TestClient) -> None:
    course = seed_course(seats=1)
    enrollment = client.post(
        "/enrolled",
        json={"email": "student@example.com", "courseId": str(course.id)},
    ).json()["insertedId"]
    before = _get_sample("purchases_total", {"result": "completed"})

    client.post(
        "/payments",
        json={
            "courseId": str(course.id),
            "enrollmentId": enrollment,
            "transactionId": "pi_1",
            "price": 49.99,
        },
        headers=auth("student@example.com"),
    )
    assert _get_sample("purchases_total", {"result": "completed"}) - before == 1


def test_metrics_endpoint_returns_prometheus_format(client: TestClient) -> None:
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert "purchases_total" in resp.text


def test_metrics_endpoint_not_self_instrumented(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/metrics")
    client.get("/metrics")
    assert _get_sample("http_requests_total", labels) == before
