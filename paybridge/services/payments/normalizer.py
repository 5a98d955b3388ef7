"""Map gateway responses and simulation payloads onto `PaymentResult`."""

from typing import Any

from pydantic import ValidationError as SchemaError

from paybridge.services.payments.errors import GatewayError
from paybridge.services.payments.schemas import PaymentRequest, PaymentResult


GATEWAY_STATUS_MAP = {
    "approved": "approved",
    "pending": "pending",
    "in_process": "pending",
    "authorized": "pending",
    "in_mediation": "pending",
    "rejected": "rejected",
    "cancelled": "rejected",
    "refunded": "rejected",
    "charged_back": "rejected",
}

DEFAULT_MESSAGES = {
    "approved": "Payment approved",
    "pending": "Payment pending",
    "rejected": "Payment rejected",
}


def _ticket_url(raw: dict[str, Any]) -> str | None:
    if raw.get("ticket_url"):
        return str(raw["ticket_url"])
    details = raw.get("transaction_details")
    if isinstance(details, dict) and details.get("external_resource_url"):
        return str(details["external_resource_url"])
    return None


def normalize(raw: dict[str, Any], *, simulated: bool, request: PaymentRequest | None = None) -> PaymentResult:
    """Build the canonical result; `simulated` comes from the caller, never from `raw`.

    Fields missing from `raw` are filled from `request` when given. Raises
    `GatewayError` when the payload has no id or an unknown status.
    """

    raw_status = str(raw.get("status") or "").lower()
    status = GATEWAY_STATUS_MAP.get(raw_status)
    if status is None or raw.get("id") in (None, ""):
        raise GatewayError(f"malformed payment payload: id={raw.get('id')!r} status={raw.get('status')!r}")

    status_detail = str(raw.get("status_detail") or raw_status)
    message = raw.get("message")
    if not message:
        message = DEFAULT_MESSAGES[status]
        if status_detail != status:
            message = f"{message} ({status_detail})"

    payer = raw.get("payer") if isinstance(raw.get("payer"), dict) else None
    metadata = raw.get("metadata") if isinstance(raw.get("metadata"), dict) else None
    amount = raw.get("transaction_amount")
    description = raw.get("description")
    payment_method_id = raw.get("payment_method_id")
    if request is not None:
        payer = payer or request.payer.model_dump(exclude_none=True)
        metadata = metadata if metadata is not None else dict(request.metadata)
        amount = amount if amount is not None else request.transaction_amount
        description = description or request.description
        payment_method_id = payment_method_id or request.payment_method_id

    try:
        return PaymentResult(
            id=str(raw["id"]),
            status=status,
            status_detail=status_detail,
            transaction_amount=amount,
            description=description,
            payer=payer or {},
            payment_method_id=payment_method_id,
            payment_type_id=raw.get("payment_type_id"),
            date_created=raw.get("date_created"),
            date_approved=raw.get("date_approved") if status == "approved" else None,
            ticket_url=_ticket_url(raw),
            metadata=metadata or {},
            simulated=simulated,
            message=str(message),
        )
    except SchemaError as exc:
        raise GatewayError(f"malformed payment payload: {exc.error_count()} invalid fields") from exc


def normalize_gateway_response(raw: dict[str, Any], request: PaymentRequest | None = None) -> PaymentResult:
    return normalize(raw, simulated=False, request=request)


def normalize_simulation_result(raw: dict[str, Any], request: PaymentRequest | None = None) -> PaymentResult:
    return normalize(raw, simulated=True, request=request)
