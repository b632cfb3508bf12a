"""Prometheus metric inventory.

All metrics live here so /metrics has a single source of truth; the
modules that own a behavior import the metric and update it in place.

HTTP metrics are labelled with the route TEMPLATE ("/courses/{course_id}"),
not the raw path, so a UUID in the URL does not mint a new time series per
course.  See MetricsMiddleware for how the template is resolved.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Domain metrics
# ---------------------------------------------------------------------------

AUTHZ_DENIALS = Counter(
    "authz_denials_total",
    "Requests refused by the authorization gate",
    ["reason"],  # invalid_token | expired_token | forbidden | role
)

PURCHASES = Counter(
    "purchases_total",
    "Purchase attempts by outcome",
    ["result"],  # completed | sold_out | not_owned | failed
)

PAYMENT_INTENTS = Counter(
    "payment_intents_total",
    "Payment-intent requests to the payment processor by outcome",
    ["result"],  # created | error
)

RATE_LIMIT_HITS = Counter(
    "rate_limit_hits_total",
    "Requests rejected by rate limiting (429s)",
    ["key_type"],  # "user" or "ip"
)
