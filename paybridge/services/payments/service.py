"""Payment orchestration.

Validates the request, routes it to simulation or the gateway, falls back to
a simulated outcome when the gateway route fails, and always resolves a
validated request to a `PaymentResult`.
"""

import asyncio
from typing import Any
from uuid import uuid4

from paybridge.common.logging import logger, payment_id_ctx, payment_kind_ctx
from paybridge.common.metrics import (
    gateway_calls_total,
    gateway_fallback_total,
    payment_outcomes_total,
    retries_total,
)
from paybridge.common.state_machine import validate_transition
from paybridge.services.payments.errors import GatewayError, GatewayUnavailable
from paybridge.services.payments.gateway import GatewayAdapter
from paybridge.services.payments.normalizer import normalize_gateway_response, normalize_simulation_result
from paybridge.services.payments.schemas import PaymentKind, PaymentRequest, PaymentResult
from paybridge.services.payments.simulation import PaymentSimulator
from paybridge.services.payments.validator import validate_payment_request


class PaymentRun:
    """Routing state of one request, advanced through the transition table."""

    def __init__(self) -> None:
        self.state = "RECEIVED"
        self.history = ["RECEIVED"]

    def advance(self, new_state: str) -> None:
        validate_transition(self.state, new_state)
        self.state = new_state
        self.history.append(new_state)


class PaymentOrchestrator:
    """Single entry point for card and alternative payments."""

    def __init__(
        self,
        gateway: GatewayAdapter,
        simulator: PaymentSimulator,
        default_description: str = "Suscripción DENTALUX",
        fallback_mode: str = "approve",
        max_attempts: int = 1,
        backoff_base_seconds: float = 0.5,
        service_name: str = "payments",
    ) -> None:
        self.gateway = gateway
        self.simulator = simulator
        self.default_description = default_description
        self.fallback_mode = fallback_mode
        self.max_attempts = max(1, max_attempts)
        self.backoff_base_seconds = backoff_base_seconds
        self.service_name = service_name

    async def process(self, body: Any, kind: PaymentKind = PaymentKind.CARD) -> PaymentResult:
        """Resolve one inbound body to a terminal result.

        `ValidationError` propagates to the caller before any routing happens.
        Past validation nothing propagates: gateway failures and unexpected
        errors both end in the fallback outcome.
        """

        kind_token = payment_kind_ctx.set(kind.value)
        id_token = payment_id_ctx.set("")
        try:
            return await self._resolve(body, kind)
        finally:
            payment_id_ctx.reset(id_token)
            payment_kind_ctx.reset(kind_token)

    async def _resolve(self, body: Any, kind: PaymentKind) -> PaymentResult:
        run = PaymentRun()
        request = validate_payment_request(body, kind, self.default_description)
        run.advance("VALIDATED")
        try:
            result = await self._route(request, kind, run)
        except Exception as exc:
            if run.state == "FALLBACK_SIMULATED":
                raise
            logger.exception("payment_unexpected_error kind=%s state=%s error=%s", kind.value, run.state, exc)
            result = self._fallback(request, run, "unexpected_error")
        run.advance("RESOLVED")

        payment_id_ctx.set(result.id)
        payment_outcomes_total.labels(
            service=self.service_name,
            route=kind.value,
            status=result.status,
            simulated=str(result.simulated).lower(),
        ).inc()
        logger.info(
            "payment_resolved kind=%s status=%s simulated=%s path=%s",
            kind.value,
            result.status,
            result.simulated,
            ">".join(run.history),
        )
        if result.status == "approved":
            self._on_approved(result)
        return result

    def simulation_reason(self, request: PaymentRequest) -> str | None:
        """Why this request skips the gateway, or None when it should call it."""

        if request.simulation_requested:
            return "simulation_requested"
        if not request.token:
            return "no_token"
        if not self.gateway.configured:
            return "gateway_not_configured"
        return None

    async def _route(self, request: PaymentRequest, kind: PaymentKind, run: PaymentRun) -> PaymentResult:
        if kind is PaymentKind.ALTERNATIVE:
            run.advance("ROUTE_SIMULATED")
            return normalize_simulation_result(self.simulator.simulate_voucher(request), request)

        reason = self.simulation_reason(request)
        if reason is not None:
            run.advance("ROUTE_SIMULATED")
            logger.info("payment_simulated reason=%s", reason)
            return normalize_simulation_result(self.simulator.simulate_card(request), request)

        run.advance("ROUTE_GATEWAY")
        try:
            raw = await self._call_gateway(request)
            if isinstance(raw, GatewayUnavailable):
                logger.warning("gateway_unavailable reason=%s", raw.reason)
                return self._fallback(request, run, "gateway_unavailable")
            return normalize_gateway_response(raw, request)
        except GatewayError as exc:
            logger.warning("gateway_error status_code=%s error=%s", exc.status_code, exc.message)
            return self._fallback(request, run, "gateway_error")
        except Exception as exc:
            logger.exception("gateway_call_failed error=%s", exc)
            return self._fallback(request, run, "gateway_error")

    async def _call_gateway(self, request: PaymentRequest) -> dict | GatewayUnavailable:
        """Call the adapter, retrying retryable failures with exponential backoff."""

        idempotency_key = str(uuid4())
        for attempt in range(1, self.max_attempts + 1):
            try:
                raw = await self.gateway.create_payment(request, idempotency_key)
            except GatewayError as exc:
                gateway_calls_total.labels(service=self.service_name, result="error").inc()
                if not exc.retryable or attempt == self.max_attempts:
                    raise
                backoff_seconds = self.backoff_base_seconds * 2 ** (attempt - 1)
                retries_total.labels(service=self.service_name, dependency="gateway").inc()
                logger.warning("gateway retry attempt=%s backoff_s=%s error=%s", attempt, backoff_seconds, exc.message)
                await asyncio.sleep(backoff_seconds)
                continue
            gateway_calls_total.labels(service=self.service_name, result="ok").inc()
            return raw
        raise GatewayError("gateway attempts exhausted")

    def _fallback(self, request: PaymentRequest, run: PaymentRun, reason: str) -> PaymentResult:
        run.advance("FALLBACK_SIMULATED")
        gateway_fallback_total.labels(service=self.service_name, reason=reason).inc()
        approve = self.fallback_mode == "approve"
        logger.warning("payment_fallback reason=%s mode=%s", reason, self.fallback_mode)
        raw = self.simulator.simulate_fallback(request, reason, approve=approve)
        return normalize_simulation_result(raw, request)

    def _on_approved(self, result: PaymentResult) -> None:
        # Subscription activation is handled by /api/activate-subscription.
        logger.info("payment_approved payment_id=%s simulated=%s", result.id, result.simulated)
