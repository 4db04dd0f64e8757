from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest


HTTP_REQUESTS_TOTAL = Counter(
    "billing_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "billing_http_request_duration_seconds",
    "HTTP request duration (seconds)",
    ["method", "path"],
)

TARIFF_UPDATE_EVENTS_TOTAL = Counter(
    "billing_tariff_update_events_total",
    "Tariff assignment update attempts by outcome",
    ["result"],
)

AUTH_EVENTS_TOTAL = Counter(
    "billing_auth_events_total",
    "Authentication/authorization events",
    ["event", "result"],
)


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST
