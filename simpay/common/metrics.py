"""Prometheus metric definitions shared by the client and the gateway."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


payment_requests_total = Counter("payment_requests_total", "Total payment operations", ["operation"])
payment_success_total = Counter("payment_success_total", "Total successful payment operations", ["operation"])
payment_failure_total = Counter(
    "payment_failure_total",
    "Total failed payment operations",
    ["operation", "code"],
)
payment_latency_seconds = Histogram("payment_latency_seconds", "Payment operation latency seconds", ["operation"])
retries_total = Counter("retries_total", "Retry count", ["operation"])
rate_limited_total = Counter("rate_limited_total", "Operations denied admission", ["operation"])
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
