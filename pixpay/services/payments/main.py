"""HTTP surface for PIX payment creation and status polling.

Both entry points are thin shells: body/method checks here, everything else
in `PixPaymentService` and `StatusReconciler`. Responses are never cacheable
so a status check always reflects a live gateway read.
"""

import json
from time import perf_counter
from uuid import uuid4

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pixpay.common.config import settings
from pixpay.common.db import SessionLocal
from pixpay.common.errors import GatewayError, PixPayError, ValidationError
from pixpay.common.logging import configure_logging, logger, trace_id_ctx
from pixpay.common.metrics import http_request_duration_seconds, http_requests_total, metrics_response
from pixpay.common.startup import log_startup_config
from pixpay.common.tracing import instrument_app, setup_tracing
from pixpay.services.payments.normalizer import normalize_checkout
from pixpay.services.payments.reconciler import StatusReconciler
from pixpay.services.payments.schemas import PaymentResult, ReconciliationResult
from pixpay.services.payments.service import PixPaymentService
from pixpay.services.payments.store import PaymentStore

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings.service_name,
    [
        "SERVICE_NAME",
        "POSTGRES_DSN",
        "USE_ASAAS_PRODUCTION",
        "ASAAS_API_KEY_SANDBOX",
        "ASAAS_API_KEY_PRODUCTION",
        "ASAAS_API_KEY",
        "GATEWAY_TIMEOUT_SECONDS",
    ],
)
store = PaymentStore(SessionLocal)

app = FastAPI(title="PixPay Payments")
instrument_app(app)


def get_payment_service() -> PixPaymentService:
    """Build the orchestrator with the gateway config resolved for this request."""

    return PixPaymentService(settings.gateway_config(), store, service_name=settings.service_name)


def get_reconciler() -> StatusReconciler:
    return StatusReconciler(settings.gateway_config(), store)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Record request count/latency and mark every response as non-cacheable."""

    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    trace_token = trace_id_ctx.set(request.headers.get("x-correlation-id") or str(uuid4()))
    try:
        response = await call_next(request)
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        response.headers.update(NO_CACHE_HEADERS)
        return response
    finally:
        trace_id_ctx.reset(trace_token)
        elapsed = max(0.0, perf_counter() - start)
        http_request_duration_seconds.labels(
            service=settings.service_name,
            route=route,
            method=method,
        ).observe(elapsed)
        http_requests_total.labels(
            service=settings.service_name,
            route=route,
            method=method,
            status_code=str(status_code),
        ).inc()


@app.exception_handler(ValidationError)
async def validation_error_handler(_: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=exc.to_payload(), headers=NO_CACHE_HEADERS)


@app.exception_handler(PixPayError)
async def payment_error_handler(_: Request, exc: PixPayError) -> JSONResponse:
    """Configuration, gateway, invalid-charge and persistence failures are all 500s."""

    payload = exc.to_payload()
    if isinstance(exc, GatewayError):
        payload["upstreamStatus"] = exc.status_code
    logger.error("request_failed error_type=%s error=%s", type(exc).__name__, exc)
    return JSONResponse(status_code=500, content=payload, headers=NO_CACHE_HEADERS)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    headers = dict(NO_CACHE_HEADERS)
    headers.update(exc.headers or {})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail, "details": None}, headers=headers)


@app.post("/create-customer-payment", response_model=PaymentResult)
async def create_customer_payment(request: Request, service: PixPaymentService = Depends(get_payment_service)):
    """Normalize checkout JSON and run the PIX payment flow."""

    body = await request.body()
    if not body.strip():
        raise ValidationError("request body not provided")
    try:
        raw = json.loads(body)
    except ValueError as exc:
        raise ValidationError("request body is not valid JSON") from exc
    checkout = normalize_checkout(raw)
    return await service.create_pix_payment(checkout)


@app.get("/check-payment-status", response_model=ReconciliationResult)
async def check_payment_status(
    payment_id: str | None = Query(default=None, alias="paymentId"),
    reconciler: StatusReconciler = Depends(get_reconciler),
):
    """Fetch live charge status and mirror it onto local rows."""

    if not payment_id or not payment_id.strip():
        raise ValidationError("paymentId not provided")
    return await reconciler.reconcile_status(payment_id.strip())


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@app.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}
