"""Prometheus metric definitions for the payments service."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


payment_requests_total = Counter("payment_requests_total", "Total payment requests", ["service", "route"])
payment_outcomes_total = Counter(
    "payment_outcomes_total",
    "Resolved payment outcomes by status and provenance",
    ["service", "route", "status", "simulated"],
)
payment_latency_seconds = Histogram("payment_latency_seconds", "Payment latency seconds", ["service", "route"])
gateway_calls_total = Counter("gateway_calls_total", "Gateway create-payment calls", ["service", "result"])
gateway_fallback_total = Counter(
    "gateway_fallback_total",
    "Gateway failures converted to simulated outcomes",
    ["service", "reason"],
)
retries_total = Counter("retries_total", "Retry count", ["service", "dependency"])
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
