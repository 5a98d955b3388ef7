"""Structured JSON logging with payment request context fields."""

import logging
import sys
from contextvars import ContextVar

from pythonjsonlogger.json import JsonFormatter

from paybridge.common.config import settings


trace_id_ctx: ContextVar[str] = ContextVar("trace_id", default="")
payment_id_ctx: ContextVar[str] = ContextVar("payment_id", default="")
payment_kind_ctx: ContextVar[str] = ContextVar("payment_kind", default="")

REDACTED = "<redacted>"


class ContextFilter(logging.Filter):
    """Inject correlation ids, payment kind and gateway mode into every log record.

    The gateway access token is scrubbed from the rendered message so an
    upstream error echoing the Authorization header never reaches the logs.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = settings.service_name
        record.trace_id = trace_id_ctx.get()
        record.payment_id = payment_id_ctx.get()
        record.payment_kind = payment_kind_ctx.get()
        record.gateway_mode = "live" if settings.gateway_configured else "simulation-only"
        token = settings.mercadopago_access_token
        if token:
            message = record.getMessage()
            if token in message:
                record.msg = message.replace(token, REDACTED)
                record.args = ()
        return True


def configure_logging() -> None:
    """Configure root logger once per service process."""

    handler = logging.StreamHandler(sys.stdout)
    context_filter = ContextFilter()
    handler.addFilter(context_filter)
    formatter = JsonFormatter(
        "%(asctime)s %(levelname)s %(service_name)s %(gateway_mode)s %(trace_id)s "
        "%(payment_kind)s %(payment_id)s %(message)s"
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.log_level)
    root.addFilter(context_filter)


logger = logging.getLogger("paybridge")
