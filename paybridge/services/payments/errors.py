"""Error taxonomy for the payment flow."""

from dataclasses import dataclass


class ValidationError(Exception):
    """Client input is missing required data; rendered as HTTP 400."""

    def __init__(self, message: str, required: list[str], missing: list[str]) -> None:
        super().__init__(message)
        self.message = message
        self.required = required
        self.missing = missing

    def to_response(self) -> dict:
        return {"error": self.message, "required": self.required, "missing": self.missing}


class GatewayError(Exception):
    """The upstream create-payment call failed or answered with garbage."""

    def __init__(self, message: str, status_code: int | None = None, retryable: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.retryable = retryable


@dataclass(frozen=True)
class GatewayUnavailable:
    """Returned instead of a response when no gateway credential is configured."""

    reason: str = "gateway credential not configured"
