"""Public HTTP surface for card and alternative payments.

Routes hand parsed bodies to the orchestrator and return its result as JSON.
Subscription activation and webhook handling are acknowledgment stubs.
"""

from datetime import datetime, timezone
from time import perf_counter
from uuid import uuid4

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from paybridge.common.config import settings
from paybridge.common.logging import configure_logging, logger, trace_id_ctx
from paybridge.common.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    metrics_response,
    payment_latency_seconds,
    payment_requests_total,
)
from paybridge.common.startup import log_startup_config
from paybridge.common.tracing import instrument_app, setup_tracing
from paybridge.services.payments.errors import ValidationError
from paybridge.services.payments.gateway import GatewayAdapter
from paybridge.services.payments.schemas import ActivateSubscriptionRequest, PaymentKind
from paybridge.services.payments.service import PaymentOrchestrator
from paybridge.services.payments.simulation import PaymentSimulator
from paybridge.services.payments.validator import REQUIRED_FIELDS

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings.service_name,
    [
        "SERVICE_NAME",
        "MERCADOPAGO_ACCESS_TOKEN",
        "GATEWAY_BASE_URL",
        "GATEWAY_TIMEOUT_SECONDS",
        "GATEWAY_MAX_ATTEMPTS",
        "GATEWAY_FALLBACK_MODE",
    ],
    settings.gateway_configured,
)
service = PaymentOrchestrator(
    gateway=GatewayAdapter(
        access_token=settings.mercadopago_access_token,
        base_url=settings.gateway_base_url,
        timeout_seconds=settings.gateway_timeout_seconds,
    ),
    simulator=PaymentSimulator(settings.voucher_base_url),
    default_description=settings.default_description,
    fallback_mode=settings.gateway_fallback_mode,
    max_attempts=settings.gateway_max_attempts,
    service_name=settings.service_name,
)

app = FastAPI(title="PayBridge Payments API")
instrument_app(app)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_orchestrator() -> PaymentOrchestrator:
    return service


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Record request count and latency for every HTTP call."""

    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        return response
    finally:
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


@app.middleware("http")
async def correlation_middleware(request: Request, call_next):
    """Bind a trace id to the request's log records and echo it back."""

    trace_id = request.headers.get("x-correlation-id") or str(uuid4())
    token = trace_id_ctx.set(trace_id)
    try:
        response = await call_next(request)
    finally:
        trace_id_ctx.reset(token)
    response.headers["x-correlation-id"] = trace_id
    return response


@app.exception_handler(ValidationError)
async def validation_error_handler(_: Request, exc: ValidationError):
    logger.warning("payment_validation_failed missing=%s", exc.missing)
    return JSONResponse(status_code=400, content=exc.to_response())


@app.exception_handler(Exception)
async def unhandled_error_handler(_: Request, exc: Exception):
    logger.error("unhandled_error error=%s", exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error", "message": str(exc)})


async def _read_json(request: Request):
    try:
        return await request.json()
    except ValueError as exc:
        raise ValidationError("Request body must be valid JSON", REQUIRED_FIELDS, list(REQUIRED_FIELDS)) from exc


async def _process(request: Request, orchestrator: PaymentOrchestrator, kind: PaymentKind) -> dict:
    body = await _read_json(request)
    payment_requests_total.labels(service=settings.service_name, route=kind.value).inc()
    with payment_latency_seconds.labels(service=settings.service_name, route=kind.value).time():
        result = await orchestrator.process(body, kind)
    return result.to_response()


@app.post("/api/process-payment")
async def process_payment(request: Request, orchestrator: PaymentOrchestrator = Depends(get_orchestrator)):
    """Resolve a card payment; any resolved outcome, including `rejected`, is a 200."""

    return await _process(request, orchestrator, PaymentKind.CARD)


@app.post("/api/process-alternative-payment")
async def process_alternative_payment(
    request: Request,
    orchestrator: PaymentOrchestrator = Depends(get_orchestrator),
):
    """Resolve a voucher payment as `pending` with a ticket reference."""

    return await _process(request, orchestrator, PaymentKind.ALTERNATIVE)


@app.post("/api/activate-subscription")
def activate_subscription(req: ActivateSubscriptionRequest):
    """Acknowledge a subscription activation for a paid plan."""

    logger.info("subscription_activated payment_id=%s plan=%s", req.payment_id, req.plan)
    return {
        "success": True,
        "message": "Subscription activated",
        "user": {"email": req.email, "plan": req.plan, "status": "active"},
    }


@app.post("/webhook")
async def webhook(request: Request):
    """Acknowledge gateway notifications; payment notifications are logged."""

    try:
        body = await request.json()
    except ValueError:
        logger.warning("webhook_unparseable_body")
        return PlainTextResponse("OK")
    notification_type = body.get("type") if isinstance(body, dict) else None
    logger.info("webhook_received type=%s", notification_type)
    if notification_type == "payment":
        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        logger.info("webhook_payment_notification gateway_id=%s", data.get("id"))
    return PlainTextResponse("OK")


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@app.get("/health")
def health(orchestrator: PaymentOrchestrator = Depends(get_orchestrator)):
    """Health probe; also reports whether real gateway calls are possible."""

    return {
        "status": "ok",
        "message": "Payments service running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "gateway_configured": orchestrator.gateway.configured,
    }


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
