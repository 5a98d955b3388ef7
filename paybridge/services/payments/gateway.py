"""MercadoPago create-payment client.

One call per invocation; retries are the orchestrator's decision.
"""

import httpx

from paybridge.common.logging import logger
from paybridge.services.payments.errors import GatewayError, GatewayUnavailable
from paybridge.services.payments.schemas import PaymentRequest


def _error_message(resp: httpx.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        return resp.text[:200] or f"HTTP {resp.status_code}"
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("error") or payload)
    return str(payload)


class GatewayAdapter:
    """Submits real payments to the gateway with a fixed access token."""

    def __init__(
        self,
        access_token: str | None,
        base_url: str = "https://api.mercadopago.com",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._access_token = access_token
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._access_token)

    async def create_payment(self, request: PaymentRequest, idempotency_key: str) -> dict | GatewayUnavailable:
        """POST the payment and return the gateway's JSON object unmodified."""

        if not self.configured:
            return GatewayUnavailable()

        headers = {
            "Authorization": f"Bearer {self._access_token}",
            "X-Idempotency-Key": idempotency_key,
        }
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                transport=self._transport,
            ) as client:
                resp = await client.post("/v1/payments", json=request.gateway_body(), headers=headers)
        except httpx.TimeoutException as exc:
            raise GatewayError(f"gateway timeout after {self.timeout_seconds}s", retryable=True) from exc
        except httpx.HTTPError as exc:
            raise GatewayError(f"gateway transport error: {exc}", retryable=True) from exc

        if resp.status_code >= 400:
            raise GatewayError(
                _error_message(resp),
                status_code=resp.status_code,
                retryable=resp.status_code >= 500,
            )
        try:
            payload = resp.json()
        except ValueError as exc:
            raise GatewayError("gateway returned a non-JSON body", status_code=resp.status_code) from exc
        if not isinstance(payload, dict):
            raise GatewayError("gateway returned a non-object body", status_code=resp.status_code)
        logger.info("gateway_payment_created gateway_id=%s status=%s", payload.get("id"), payload.get("status"))
        return payload
