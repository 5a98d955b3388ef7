"""Required-field checks and default substitution for inbound payment bodies."""

import math
from typing import Any

from paybridge.services.payments.errors import ValidationError
from paybridge.services.payments.schemas import CardData, Identification, Payer, PaymentKind, PaymentRequest


REQUIRED_FIELDS = ["transaction_amount", "payer.email"]
DEFAULT_IDENTIFICATION = {"type": "DNI", "number": "12345678"}


def _to_amount(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(amount) or amount <= 0:
        return None
    return amount


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def _to_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return value is True


def _identification(payer: dict) -> Identification:
    raw = payer.get("identification")
    if isinstance(raw, dict) and raw.get("type") and raw.get("number"):
        return Identification(type=str(raw["type"]), number=str(raw["number"]))
    return Identification(**DEFAULT_IDENTIFICATION)


def _card_data(raw: Any) -> CardData | None:
    if not isinstance(raw, dict):
        return None
    holder_name = raw.get("holder_name")
    return CardData(holder_name=None if holder_name is None else str(holder_name))


def validate_payment_request(
    body: Any,
    kind: PaymentKind = PaymentKind.CARD,
    default_description: str = "Suscripción DENTALUX",
) -> PaymentRequest:
    """Check required fields and return a normalized `PaymentRequest`.

    Raises `ValidationError` listing every missing or invalid required field.
    Optional fields never fail validation: malformed values fall back to their
    defaults (installments 1, issuer omitted, placeholder identification).
    Alternative-payment bodies keep only amount, description, method, payer
    email and metadata.
    """

    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object", REQUIRED_FIELDS, list(REQUIRED_FIELDS))

    missing = []
    amount = _to_amount(body.get("transaction_amount"))
    if amount is None:
        missing.append("transaction_amount")
    payer = body.get("payer") if isinstance(body.get("payer"), dict) else {}
    email = payer.get("email")
    if not isinstance(email, str) or not email.strip():
        missing.append("payer.email")
    if missing:
        raise ValidationError("Missing required data", REQUIRED_FIELDS, missing)

    description = body.get("description")
    if not isinstance(description, str) or not description:
        description = default_description
    metadata = body.get("metadata") if isinstance(body.get("metadata"), dict) else {}
    payment_method_id = body.get("payment_method_id")
    payment_method_id = str(payment_method_id) if payment_method_id else None

    if kind is PaymentKind.ALTERNATIVE:
        return PaymentRequest(
            transaction_amount=amount,
            description=description,
            payment_method_id=payment_method_id,
            payer=Payer(email=email.strip()),
            metadata=metadata,
            simulation_requested=True,
        )

    installments = _to_int(body.get("installments"))
    token = body.get("token")
    return PaymentRequest(
        transaction_amount=amount,
        description=description,
        payment_method_id=payment_method_id,
        installments=installments if installments and installments > 0 else 1,
        issuer_id=_to_int(body.get("issuer_id")),
        token=str(token) if token else None,
        payer=Payer(email=email.strip(), identification=_identification(payer)),
        metadata=metadata,
        card_data=_card_data(body.get("card_data")),
        simulation_requested=_to_flag(body.get("simulation_requested")),
    )
