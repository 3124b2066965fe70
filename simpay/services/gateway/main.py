"""HTTP entrypoint wiring the payment client to a record store.

The gateway is the caller the client expects: it renders results as JSON and
persists settled payments. The client itself never touches the database.
"""

from contextlib import asynccontextmanager
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from simpay.common.config import settings
from simpay.common.db import Base, SessionLocal, engine
from simpay.common.errors import PaymentError, PaymentErrorCode
from simpay.common.logging import configure_logging, logger, trace_id_ctx
from simpay.common.metrics import http_request_duration_seconds, http_requests_total, metrics_response
from simpay.common.startup import log_startup_config
from simpay.common.tracing import instrument_app, setup_tracing
from simpay.services.gateway.service import PaymentRecordStore
from simpay.services.processor.client import PaymentClient
from simpay.services.processor.records import build_payment_record
from simpay.services.processor.schemas import ClientConfig, PaymentRequest, PaymentStatus

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings.service_name,
    [
        "SERVICE_NAME",
        "PAYMENTS_API_KEY",
        "PAYMENTS_MODE",
        "PAYMENTS_ENVIRONMENT",
        "PAYMENTS_MAX_RETRIES",
        "PAYMENTS_BACKOFF_MS",
        "PAYMENTS_RATE_LIMIT_MAX_ATTEMPTS",
        "PAYMENTS_RATE_LIMIT_WINDOW_MS",
        "DATABASE_URL",
    ],
)
client = PaymentClient(ClientConfig.from_settings(settings))
store = PaymentRecordStore(SessionLocal)

ERROR_STATUS_CODES: dict[PaymentErrorCode, int] = {
    PaymentErrorCode.INVALID_API_KEY: 401,
    PaymentErrorCode.INVALID_AMOUNT: 422,
    PaymentErrorCode.INVALID_CURRENCY: 422,
    PaymentErrorCode.AMOUNT_TOO_LARGE: 422,
    PaymentErrorCode.INVALID_CARD: 402,
    PaymentErrorCode.CARD_DECLINED: 402,
    PaymentErrorCode.INSUFFICIENT_FUNDS: 402,
    PaymentErrorCode.EXPIRED_CARD: 402,
    PaymentErrorCode.RATE_LIMITED: 429,
    PaymentErrorCode.NETWORK_ERROR: 503,
    PaymentErrorCode.PROCESSING_ERROR: 400,
}


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Create the record table before serving."""

    Base.metadata.create_all(engine)
    yield


app = FastAPI(title="SimPay Gateway", lifespan=lifespan)
instrument_app(app)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Record request count and latency; bind the correlation id to logs."""

    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    token = trace_id_ctx.set(request.headers.get("x-correlation-id") or str(uuid4()))
    try:
        response = await call_next(request)
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        return response
    finally:
        trace_id_ctx.reset(token)
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


@app.exception_handler(PaymentError)
async def payment_error_handler(_: Request, exc: PaymentError) -> JSONResponse:
    """Map payment error codes to HTTP statuses."""

    return JSONResponse(
        status_code=ERROR_STATUS_CODES.get(exc.code, 400),
        content={"error": exc.to_dict()},
    )


class StatusUpdate(BaseModel):
    """Body accepted by `PATCH /payments/{payment_id}`."""

    status: PaymentStatus


@app.post("/payments")
async def create_payment(req: PaymentRequest):
    """Process a payment, then persist its record.

    A persistence failure does not undo the settled payment; it is logged with
    the payment id and reported as a 500.
    """

    payment = await client.create_payment(req)
    try:
        store.create(build_payment_record(payment), created_at=payment.created_at)
    except Exception as exc:
        logger.exception("payment record save failed payment_id=%s: %s", payment.id, exc)
        raise HTTPException(status_code=500, detail="failed to save payment record") from exc
    return payment.model_dump(mode="json")


@app.get("/payments/{payment_id}/status")
async def get_payment_status(payment_id: str):
    """Ask the processor for the current status of a payment."""

    response = await client.get_payment_status(payment_id)
    return response.model_dump(mode="json")


@app.get("/payments/{payment_id}")
def get_payment(payment_id: str):
    record = store.get(payment_id)
    if record is None:
        raise HTTPException(status_code=404, detail="payment not found")
    return record.to_dict()


@app.patch("/payments/{payment_id}")
def update_payment_status(payment_id: str, body: StatusUpdate):
    record = store.update_status(payment_id, body.status)
    if record is None:
        raise HTTPException(status_code=404, detail="payment not found")
    return record.to_dict()


@app.get("/payments")
def list_payments(email: str | None = None, limit: int = Query(default=10, ge=1, le=100)):
    """Newest stored payments, optionally filtered by customer email."""

    rows = store.by_email(email, limit=limit) if email else store.recent(limit)
    return [row.to_dict() for row in rows]


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@app.get("/health")
def health():
    """Container health check endpoint."""

    return {"ok": True}
