"""Prometheus metric definitions for the payments service."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


payment_requests_total = Counter("payment_requests_total", "Total PIX payment requests", ["service"])
payment_success_total = Counter("payment_success_total", "Total PIX payments created", ["service"])
payment_failure_total = Counter(
    "payment_failure_total",
    "Total failed PIX payment creations",
    ["service", "error_type"],
)
payment_latency_seconds = Histogram("payment_latency_seconds", "Payment creation latency seconds", ["service"])
gateway_requests_total = Counter(
    "gateway_requests_total",
    "Total calls to the payment gateway",
    ["operation", "status_code"],
)
gateway_latency_seconds = Histogram(
    "gateway_latency_seconds",
    "Payment gateway call latency seconds",
    ["operation"],
)
step_failures_total = Counter(
    "step_failures_total",
    "Orchestration step failures by step and policy",
    ["step", "policy"],
)
reconciliations_total = Counter(
    "reconciliations_total",
    "Status reconciliation runs by outcome",
    ["outcome"],
)
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
