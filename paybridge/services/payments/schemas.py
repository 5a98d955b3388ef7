"""Request/result schemas shared by the payment routes and the orchestrator."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


PaymentStatus = Literal["approved", "pending", "rejected"]

GATEWAY_FIELDS = {
    "token",
    "transaction_amount",
    "description",
    "payment_method_id",
    "installments",
    "issuer_id",
    "payer",
    "metadata",
}


class PaymentKind(str, Enum):
    """Which public route a request arrived on."""

    CARD = "card"
    ALTERNATIVE = "alternative"


class Identification(BaseModel):
    type: str
    number: str


class Payer(BaseModel):
    email: str
    identification: Identification | None = None


class CardData(BaseModel):
    """Card details sent by the checkout form; only the holder name is read."""

    holder_name: str | None = None


class PaymentRequest(BaseModel):
    """Normalized payment request handed to simulation or the gateway."""

    transaction_amount: float = Field(gt=0)
    description: str
    payment_method_id: str | None = None
    installments: int = Field(default=1, ge=1)
    issuer_id: int | None = None
    token: str | None = None
    payer: Payer
    metadata: dict[str, Any] = Field(default_factory=dict)
    card_data: CardData | None = None
    simulation_requested: bool = False

    def gateway_body(self) -> dict[str, Any]:
        """Body for the gateway's create-payment call, without unset optionals."""

        return self.model_dump(include=GATEWAY_FIELDS, exclude_none=True)


class PaymentResult(BaseModel):
    """Canonical terminal outcome returned to the caller."""

    id: str
    status: PaymentStatus
    status_detail: str
    transaction_amount: float
    description: str | None = None
    payer: dict[str, Any] = Field(default_factory=dict)
    payment_method_id: str | None = None
    payment_type_id: str | None = None
    date_created: str | None = None
    date_approved: str | None = None
    ticket_url: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    simulated: bool
    message: str

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ActivateSubscriptionRequest(BaseModel):
    """Payload accepted by `POST /api/activate-subscription`."""

    payment_id: str | int | None = None
    plan: str | None = None
    email: str | None = None
    name: str | None = None
    phone: str | None = None
