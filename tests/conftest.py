"""Shared fakes for payment flow tests."""

import pytest

from paybridge.services.payments.errors import GatewayError
from paybridge.services.payments.service import PaymentOrchestrator
from paybridge.services.payments.simulation import PaymentSimulator


class FakeGateway:
    """Scripted gateway: returns queued responses or raises queued errors."""

    def __init__(self, configured: bool = True, outcomes: list | None = None) -> None:
        self.configured = configured
        self.outcomes = list(outcomes or [])
        self.calls: list[dict] = []

    async def create_payment(self, request, idempotency_key):
        self.calls.append({"body": request.gateway_body(), "idempotency_key": idempotency_key})
        outcome = self.outcomes.pop(0) if self.outcomes else GatewayError("no scripted outcome")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def fake_gateway():
    return FakeGateway


@pytest.fixture
def simulator():
    return PaymentSimulator("https://vouchers.test/ticket")


@pytest.fixture
def make_orchestrator(simulator):
    def factory(gateway, **kwargs):
        kwargs.setdefault("backoff_base_seconds", 0)
        return PaymentOrchestrator(gateway=gateway, simulator=simulator, **kwargs)

    return factory
