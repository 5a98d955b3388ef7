"""Deterministic local stand-in for the payment gateway.

Card outcomes follow the sandbox test-card convention: a cardholder name
containing "APRO" is approved, one containing "CONT" is rejected with a
call-for-authorize reason, and anything else is approved. Alternative
(voucher) payments always come back pending with a ticket reference.
"""

from datetime import datetime, timezone
from uuid import uuid4

from paybridge.services.payments.schemas import CardData, PaymentRequest


SIMULATED_ID_PREFIX = "SIM-"
APPROVE_TRIGGER = "APRO"
REJECT_TRIGGER = "CONT"


def decide_card_outcome(card_data: CardData | None) -> str:
    """Return `approved` or `rejected` from the cardholder name heuristic."""

    if card_data is None:
        return "approved"
    holder_name = (card_data.holder_name or "").upper()
    if APPROVE_TRIGGER in holder_name:
        return "approved"
    if REJECT_TRIGGER in holder_name:
        return "rejected"
    return "approved"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return f"{SIMULATED_ID_PREFIX}{uuid4().hex[:16]}"


class PaymentSimulator:
    """Builds gateway-shaped payment payloads without network access."""

    def __init__(self, voucher_base_url: str) -> None:
        self.voucher_base_url = voucher_base_url.rstrip("/")

    def _base(self, request: PaymentRequest) -> dict:
        return {
            "id": _new_id(),
            "transaction_amount": request.transaction_amount,
            "description": request.description,
            "payer": request.payer.model_dump(exclude_none=True),
            "metadata": dict(request.metadata),
            "date_created": _now(),
            "simulated": True,
        }

    def _approved(self, request: PaymentRequest, message: str) -> dict:
        raw = self._base(request)
        raw.update(
            status="approved",
            status_detail="accredited",
            payment_method_id=request.payment_method_id or "visa",
            payment_type_id="credit_card",
            date_approved=raw["date_created"],
            message=message,
        )
        return raw

    def simulate_card(self, request: PaymentRequest) -> dict:
        """Resolve a card payment with the cardholder name heuristic."""

        if decide_card_outcome(request.card_data) == "approved":
            return self._approved(request, "Payment approved (simulated)")
        raw = self._base(request)
        raw.update(
            status="rejected",
            status_detail="cc_rejected_call_for_authorize",
            payment_method_id=request.payment_method_id or "visa",
            payment_type_id="credit_card",
            message=(
                f"Payment rejected (simulated): cardholder name contains '{REJECT_TRIGGER}'. "
                f"Use a cardholder name containing '{APPROVE_TRIGGER}' to force approval."
            ),
        )
        return raw

    def simulate_voucher(self, request: PaymentRequest) -> dict:
        """Resolve a cash-voucher style payment as pending with a ticket URL."""

        raw = self._base(request)
        raw.update(
            status="pending",
            status_detail="pending_waiting_payment",
            payment_method_id=request.payment_method_id or "oxxo",
            payment_type_id="ticket",
            ticket_url=f"{self.voucher_base_url}/{raw['id']}",
            message="Payment pending (simulated): complete it with the voucher at ticket_url.",
        )
        return raw

    def simulate_fallback(self, request: PaymentRequest, reason: str, approve: bool = True) -> dict:
        """Outcome used when the gateway route could not produce a result."""

        if approve:
            return self._approved(request, f"Payment approved in simulation mode ({reason})")
        raw = self._base(request)
        raw.update(
            status="rejected",
            status_detail="gateway_error",
            payment_method_id=request.payment_method_id,
            message=f"Payment could not be processed by the gateway ({reason})",
        )
        return raw
